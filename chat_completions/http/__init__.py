"""HTTP transport and retry policy for the chat-completions client."""

from chat_completions.http.client import HTTPClient, HTTPResponse
from chat_completions.http.retry import RetryHandler

__all__ = [
    "HTTPClient",
    "HTTPResponse",
    "RetryHandler",
]
