"""
Vapi provider plugin.

Exposes assistant and phone number resources backed by the Vapi REST API.
"""

__version__ = "0.1.0"
