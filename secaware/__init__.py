"""
Security-awareness training progress service.
"""
