"""
Kernel: storage models and the error kinds shared by the engine and API.
"""
