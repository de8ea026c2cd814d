"""HTTP transport with connection pooling for single request/response exchanges."""

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import aiohttp
from aiohttp import ClientTimeout, TCPConnector
from aiohttp.client_exceptions import ClientConnectorError, ClientError

from chat_completions.exceptions import NetworkError, RequestTimeoutError


@dataclass(frozen=True)
class HTTPResponse:
  """A fully read HTTP response."""

  status: int
  headers: Mapping[str, str]
  body: bytes


class HTTPClient:
  """HTTP client with connection pooling.

  Each call performs exactly one exchange; retrying is left to the caller.
  A single instance may be shared by concurrent calls.
  """

  def __init__(
    self,
    max_connections: int = 100,
    timeout: float = 30
  ):
    """Initialize HTTP client with connection pooling.

    Args:
      max_connections: Maximum number of connections in the pool
      timeout: Default request timeout in seconds
    """
    self.max_connections = max_connections
    self.timeout = timeout
    self.session: Optional[aiohttp.ClientSession] = None

  async def _get_session(self) -> aiohttp.ClientSession:
    """Get or create aiohttp session with connection pooling.

    Returns:
      Configured ClientSession instance
    """
    if self.session is None:
      connector = TCPConnector(limit=self.max_connections)

      self.session = aiohttp.ClientSession(
        connector=connector,
        timeout=ClientTimeout(total=self.timeout)
      )

    return self.session

  async def post(
    self,
    url: str,
    data: Optional[bytes] = None,
    headers: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
    **kwargs: Any
  ) -> HTTPResponse:
    """Make a single POST request.

    Args:
      url: Request URL
      data: Raw request body
      headers: HTTP headers
      timeout: Timeout in seconds for this exchange; defaults to the client's
      **kwargs: Additional arguments passed to aiohttp

    Returns:
      The fully read response, whatever its status code

    Raises:
      NetworkError: For network-related errors
      RequestTimeoutError: For timeout errors
    """
    return await self._make_request(
      "POST",
      url,
      data=data,
      headers=headers,
      timeout=timeout,
      **kwargs
    )

  async def _make_request(
    self,
    method: str,
    url: str,
    timeout: Optional[float] = None,
    **kwargs: Any
  ) -> HTTPResponse:
    """Make HTTP request using the session and read the whole body.

    asyncio.CancelledError is left to propagate to the caller.
    """
    session = await self._get_session()
    seconds = self.timeout if timeout is None else timeout

    try:
      async with session.request(
        method, url, timeout=ClientTimeout(total=seconds), **kwargs
      ) as response:
        body = await response.read()
        return HTTPResponse(
          status=response.status,
          headers=response.headers,
          body=body
        )
    except asyncio.TimeoutError as e:
      raise RequestTimeoutError(
        f"Request timed out after {seconds}s", timeout_seconds=seconds, cause=e
      ) from e
    except ClientConnectorError as e:
      raise NetworkError(f"Connection failed: {str(e)}", e) from e
    except ClientError as e:
      raise NetworkError(f"HTTP request failed: {str(e)}", e) from e
    except Exception as e:
      # aiohttp also raises plain ValueError/TypeError for unsendable requests
      raise NetworkError(f"HTTP request failed: {str(e)}", e) from e

  async def close(self) -> None:
    """Close the HTTP session and clean up resources."""
    if self.session is not None:
      await self.session.close()
      self.session = None

  async def __aenter__(self) -> "HTTPClient":
    """Async context manager entry."""
    return self

  async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
    """Async context manager exit with cleanup."""
    await self.close()
