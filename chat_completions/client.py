"""Chat-completion client: builds a request, retries transient failures and
classifies every outcome into a result or a typed error."""

import asyncio
import time
from typing import Any, Callable, Optional, TypeVar, Union, overload

from yarl import URL

from .codec import (
  decode_chat_response,
  decode_error_message,
  decode_structured_result,
  encode_chat_request,
  parse_request_id,
  parse_retry_after,
  utf8_snippet,
)
from .credentials import CredentialProvider, static_credential
from .exceptions import (
  APIError,
  BadURLError,
  ChatClientError,
  ConfigurationError,
  HTTPStatusError,
  NetworkError,
  RequestCancelledError,
  RequestTimeoutError,
)
from .http.client import HTTPClient, HTTPResponse
from .http.retry import RetryHandler
from .logging import ChatLogger, get_logger
from .models import ChatRequest, ClientConfig, RequestStatus

logger = get_logger(__name__)

T = TypeVar("T")

CHAT_COMPLETIONS_PATH = "chat/completions"


class ChatClient:
  """Client for a single chat-completions endpoint.

  The client is immutable after construction: every call builds its own
  request, attempt counter and timer, so one instance can serve concurrent
  calls. Only the HTTP transport is shared between calls.

  Retries happen on timeouts, network failures, 429 and 5xx responses, up to
  ``config.max_retries`` times. The timeout applies to each attempt, not to
  the call as a whole.
  """

  def __init__(
    self,
    model: str,
    api_key: Optional[str] = None,
    *,
    api_key_provider: Optional[CredentialProvider] = None,
    config: Optional[ClientConfig] = None,
    http_client: Optional[HTTPClient] = None,
    retry_handler: Optional[RetryHandler] = None,
  ):
    """Initialize the client.

    Args:
      model: Model identifier sent with every request
      api_key: Fixed bearer secret; mutually exclusive with api_key_provider
      api_key_provider: Callable returning the bearer secret, invoked once per call
      config: Client configuration; defaults to ClientConfig()
      http_client: Transport to use; when omitted the client creates and owns one
      retry_handler: Backoff policy; defaults to one using config.max_retries

    Raises:
      ConfigurationError: If the model is empty or the credential is not
        given exactly once
    """
    if not model:
      raise ConfigurationError("Model cannot be empty", field="model")

    if (api_key is None) == (api_key_provider is None):
      raise ConfigurationError(
        "Exactly one of api_key and api_key_provider must be given",
        field="api_key"
      )

    self.model = model
    self.config = config or ClientConfig()
    self._api_key_provider = api_key_provider or static_credential(api_key)
    self._owns_http_client = http_client is None
    self.http_client = http_client or HTTPClient(timeout=self.config.timeout)
    self.retry_handler = retry_handler or RetryHandler(max_retries=self.config.max_retries)

  async def request(
    self,
    system: str,
    user: str,
    temperature: float = 0.0,
    structured_output: bool = False,
  ) -> tuple[str, RequestStatus]:
    """Send a chat completion and return the reply text.

    Args:
      system: System instruction text
      user: User message text
      temperature: Sampling temperature
      structured_output: Ask the server to reply with a single JSON object

    Returns:
      Reply text and the request status

    Raises:
      ChatClientError: One of the typed errors in chat_completions.exceptions
    """
    return await self.send(
      ChatRequest(
        system=system,
        user=user,
        temperature=temperature,
        structured_output=structured_output,
      )
    )

  @overload
  async def request_json(
    self,
    system: str,
    user: str,
    temperature: float = ...,
    result_type: None = ...,
  ) -> tuple[Any, RequestStatus]: ...

  @overload
  async def request_json(
    self,
    system: str,
    user: str,
    temperature: float = ...,
    *,
    result_type: Union[type[T], Callable[[Any], T]],
  ) -> tuple[T, RequestStatus]: ...

  async def request_json(
    self,
    system: str,
    user: str,
    temperature: float = 0.0,
    result_type: Optional[Union[type[T], Callable[[Any], T]]] = None,
  ) -> tuple[Any, RequestStatus]:
    """Send a chat completion in structured-output mode and decode the reply.

    Args:
      system: System instruction text
      user: User message text
      temperature: Sampling temperature
      result_type: Dataclass or callable the parsed JSON is fed to; when
        omitted the parsed JSON value is returned

    Returns:
      Decoded value and the request status

    Raises:
      DecodingError: If the reply cannot be decoded; never retried
      ChatClientError: Any other typed error from the call itself
    """
    raw, status = await self.send(
      ChatRequest(
        system=system,
        user=user,
        temperature=temperature,
        structured_output=True,
      )
    )
    return decode_structured_result(raw, result_type), status

  async def send(self, chat_request: ChatRequest) -> tuple[str, RequestStatus]:
    """Run one logical call for the given request parameters.

    Args:
      chat_request: Call parameters

    Returns:
      Reply text and the request status

    Raises:
      ChatClientError: One of the typed errors in chat_completions.exceptions
      Exception: Whatever the credential provider raises, unchanged
    """
    url = self._endpoint_url()
    api_key = self._api_key_provider()
    body = encode_chat_request(self.model, chat_request)
    headers = self._build_headers(api_key)

    log = logger.bind(model=self.model)
    start = time.monotonic()
    attempt = 0

    try:
      while True:
        self._check_cancelled()
        attempt += 1
        log.log_request(
          method="POST",
          url=url,
          attempt=attempt,
          request_size=len(body),
          structured_output=chat_request.structured_output,
        )

        attempt_start = time.monotonic()
        try:
          response = await self.http_client.post(
            url,
            data=body,
            headers=headers,
            timeout=self.config.timeout,
          )
        except asyncio.CancelledError as e:
          if isinstance(e, RequestCancelledError):
            raise
          raise RequestCancelledError(e) from e
        except (RequestTimeoutError, NetworkError) as e:
          if not self.retry_handler.can_retry(attempt):
            raise
          await self._backoff(log, attempt, None, reason=str(e))
          continue

        log.log_response(
          status_code=response.status,
          attempt=attempt,
          latency_ms=_elapsed_ms(attempt_start),
          request_id=parse_request_id(response.headers),
        )

        if 200 <= response.status < 300:
          return self._complete(response, attempt, start, log)

        if self.retry_handler.should_retry_status(response.status, attempt):
          await self._backoff(
            log,
            attempt,
            parse_retry_after(response.headers),
            reason=f"HTTP {response.status}",
          )
          continue

        raise self._status_error(response)
    except ChatClientError as e:
      log.log_failure(e, attempt=attempt, duration_ms=_elapsed_ms(start))
      raise

  def _complete(
    self,
    response: HTTPResponse,
    attempt: int,
    start: float,
    log: ChatLogger,
  ) -> tuple[str, RequestStatus]:
    text = decode_chat_response(response.body)
    status = RequestStatus(
      http_status=response.status,
      request_id=parse_request_id(response.headers),
      retries=attempt - 1,
      duration_ms=_elapsed_ms(start),
    )
    log.info(
      "Chat completion finished",
      event_type="chat_complete",
      status_code=status.http_status,
      retries=status.retries,
      duration_ms=status.duration_ms,
      request_id=status.request_id,
    )
    return text, status

  def _status_error(self, response: HTTPResponse) -> ChatClientError:
    """Map a non-2xx response that will not be retried to an error.

    A parseable error envelope wins over the raw body, whether or not the
    status was retryable.
    """
    message = decode_error_message(response.body)
    if message is not None:
      return APIError(message, status=response.status)
    return HTTPStatusError(response.status, utf8_snippet(response.body))

  async def _backoff(
    self,
    log: ChatLogger,
    attempt: int,
    retry_after: Optional[float],
    reason: str,
  ) -> None:
    delay = self.retry_handler.compute_delay(attempt, retry_after)
    log.log_retry(
      attempt=attempt,
      delay=delay,
      reason=reason,
      retry_after=retry_after,
    )
    await self.retry_handler.sleep(delay)

  def _endpoint_url(self) -> str:
    base = self.config.base_url
    try:
      parsed = URL(base)
    except (TypeError, ValueError) as e:
      raise BadURLError(base) from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
      raise BadURLError(base)

    # Path is appended before any query string; the fragment is dropped
    path = f"{parsed.raw_path.rstrip('/')}/{CHAT_COMPLETIONS_PATH}"
    return str(parsed.with_path(path, encoded=True).with_query(parsed.query))

  def _build_headers(self, api_key: str) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if self.config.user_agent:
      headers["User-Agent"] = self.config.user_agent
    headers["Authorization"] = f"Bearer {api_key}"
    return headers

  @staticmethod
  def _check_cancelled() -> None:
    task = asyncio.current_task()
    if task is not None and task.cancelling():
      raise RequestCancelledError()

  async def close(self) -> None:
    """Close the transport if this client created it."""
    if self._owns_http_client:
      await self.http_client.close()

  async def __aenter__(self) -> "ChatClient":
    """Async context manager entry."""
    return self

  async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
    """Async context manager exit with cleanup."""
    await self.close()

  def __repr__(self) -> str:
    return (
      f"{self.__class__.__name__}("
      f"model='{self.model}', "
      f"base_url='{self.config.base_url}', "
      f"timeout={self.config.timeout}, "
      f"max_retries={self.config.max_retries})"
    )


def _elapsed_ms(start: float) -> int:
  return int((time.monotonic() - start) * 1000)
