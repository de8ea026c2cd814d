"""Exception classes for the chat-completions client.

Every error raised by a call derives from ChatClientError and carries a
``kind`` tag from a closed set: bad_url, http, api, decoding, timeout,
cancelled, network.
"""

import asyncio
from typing import Optional


class ChatClientError(Exception):
    """Base exception class for all chat-completions client errors."""

    kind = "error"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(ChatClientError):
    """Raised when there are configuration-related errors."""

    kind = "configuration"

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.config_file = config_file
        self.field = field


class BadURLError(ChatClientError):
    """Raised when the endpoint URL cannot be formed from the base URL."""

    kind = "bad_url"

    def __init__(self, url: str):
        super().__init__(f"Bad URL: {url!r}")
        self.url = url


class HTTPStatusError(ChatClientError):
    """Raised for a non-2xx response that carried no usable error envelope."""

    kind = "http"

    def __init__(self, status: int, body_snippet: str):
        super().__init__(f"HTTP {status}: {body_snippet}")
        self.status = status
        self.body_snippet = body_snippet


class APIError(ChatClientError):
    """Raised when the server answered with a structured error envelope."""

    kind = "api"

    def __init__(self, api_message: str, status: Optional[int] = None):
        super().__init__(f"API error: {api_message}")
        self.api_message = api_message
        self.status = status


class DecodingError(ChatClientError):
    """Raised when a request cannot be encoded or a response cannot be decoded.

    Never retried: a malformed body will not improve on a second attempt.
    """

    kind = "decoding"

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        super().__init__(f"Decoding error: {detail}", cause)
        self.detail = detail


class RequestTimeoutError(ChatClientError):
    """Raised when the per-attempt deadline is exceeded."""

    kind = "timeout"

    def __init__(
        self,
        message: str = "Timeout",
        timeout_seconds: Optional[float] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause)
        self.timeout_seconds = timeout_seconds


class RequestCancelledError(ChatClientError, asyncio.CancelledError):
    """Raised when the calling task is cancelled before or during an attempt.

    Also an asyncio.CancelledError, so task cancellation keeps working for
    callers that only handle the asyncio exception.
    """

    kind = "cancelled"

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("Cancelled", cause)


class NetworkError(ChatClientError):
    """Raised when network-related errors occur."""

    kind = "network"

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        super().__init__(f"Network error: {detail}", cause)
        self.detail = detail
