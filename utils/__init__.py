"""
Shared exceptions and entry point decorators.
"""
