"""Client for a chat-completions endpoint with retries and typed errors."""

from .client import ChatClient
from .credentials import CredentialProvider, environment_credential, static_credential
from .exceptions import (
    APIError,
    BadURLError,
    ChatClientError,
    ConfigurationError,
    DecodingError,
    HTTPStatusError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
)
from .models import ChatRequest, ClientConfig, RequestStatus

__all__ = [
    "ChatClient",
    "ChatRequest",
    "ClientConfig",
    "RequestStatus",
    "CredentialProvider",
    "static_credential",
    "environment_credential",
    "ChatClientError",
    "ConfigurationError",
    "BadURLError",
    "HTTPStatusError",
    "APIError",
    "DecodingError",
    "RequestTimeoutError",
    "RequestCancelledError",
    "NetworkError",
]
