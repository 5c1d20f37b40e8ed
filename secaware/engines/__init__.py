"""
Decision engines.
"""
