"""
Shared utilities: structured logging and secret masking.
"""
