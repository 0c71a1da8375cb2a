"""
Vapi REST API client package.
"""

from vapi_provider.client.errors import (
    VapiAPIError,
    VapiClientError,
    VapiNotFoundError,
    VapiSerializationError,
    VapiTransportError,
)
from vapi_provider.client.models import Assistant, AssistantModel, AssistantVoice, PhoneNumber
from vapi_provider.client.vapi_client import VapiClient

__all__ = [
    "Assistant",
    "AssistantModel",
    "AssistantVoice",
    "PhoneNumber",
    "VapiAPIError",
    "VapiClient",
    "VapiClientError",
    "VapiNotFoundError",
    "VapiSerializationError",
    "VapiTransportError",
]
