"""Structured logging support for the chat-completions client."""

import logging
import sys
from typing import Any, Dict, Optional

import structlog


class SensitiveDataFilter:
  """Masks values whose key names a secret, at any nesting depth.

  Keys are matched case-insensitively after mapping ``-`` and spaces to ``_``,
  so ``X-API-Key`` and ``openai_api_key`` both hit the ``api_key`` entry.
  """

  SENSITIVE_KEYS = ("api_key", "authorization", "bearer", "password", "secret", "token")

  @classmethod
  def filter_sensitive_data(cls, data: Any) -> Any:
    if isinstance(data, dict):
      return {
        key: cls._mask_sensitive_value(value) if cls._is_sensitive_key(key)
        else cls.filter_sensitive_data(value)
        for key, value in data.items()
      }
    if isinstance(data, (list, tuple)):
      return type(data)(cls.filter_sensitive_data(item) for item in data)
    return data

  @classmethod
  def _is_sensitive_key(cls, key: Any) -> bool:
    if not isinstance(key, str):
      return False
    normalized = key.lower().replace("-", "_").replace(" ", "_")
    return any(sensitive in normalized for sensitive in cls.SENSITIVE_KEYS)

  @staticmethod
  def _mask_sensitive_value(value: Any) -> str:
    if value is None:
      return "[NONE]"
    text = str(value)
    if len(text) <= 8:
      return "[REDACTED]"
    return f"{text[:4]}...{text[-4:]}"


def configure_logging(
  debug_mode: bool = False,
  log_level: Optional[str] = None,
  log_file: Optional[str] = None,
  structured: bool = True,
) -> None:
  """Route client log events through structlog into stdlib logging.

  Events go to stderr (and ``log_file`` when given) so stdout stays free for
  replies. Secrets are masked before rendering.

  Args:
    debug_mode: Log per-attempt request events as well
    log_level: Explicit level name (DEBUG, INFO, WARNING, ERROR); wins over debug_mode
    log_file: Optional file receiving the same events
    structured: Render JSON lines instead of the console format
  """
  level = _resolve_level(debug_mode, log_level)

  renderer = structlog.processors.JSONRenderer() if structured else structlog.dev.ConsoleRenderer()
  structlog.configure(
    processors=[
      structlog.stdlib.filter_by_level,
      structlog.stdlib.add_logger_name,
      structlog.stdlib.add_log_level,
      structlog.processors.TimeStamper(fmt="iso"),
      structlog.processors.format_exc_info,
      _filter_sensitive_processor,
      renderer,
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
  )

  handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
  if log_file:
    handlers.append(logging.FileHandler(log_file))
  for handler in handlers:
    handler.setLevel(level)

  logging.basicConfig(level=level, handlers=handlers, format="%(message)s", force=True)
  logging.getLogger("aiohttp").setLevel(logging.WARNING)


def _resolve_level(debug_mode: bool, log_level: Optional[str]) -> int:
  if log_level:
    return getattr(logging, log_level.upper(), logging.INFO)
  return logging.DEBUG if debug_mode else logging.INFO


def _filter_sensitive_processor(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
  return SensitiveDataFilter.filter_sensitive_data(event_dict)


class ChatLogger:
  """Logger for chat-completion calls with bound context."""

  def __init__(self, name: str, **context: Any):
    """Initialize the logger.

    Args:
      name: Logger name
      **context: Context bound to every event
    """
    self.name = name
    self.context = dict(context)
    self.logger = structlog.get_logger(name).bind(**self.context)

  def bind(self, **kwargs: Any) -> "ChatLogger":
    """Return a new logger with additional bound context."""
    return ChatLogger(self.name, **{**self.context, **kwargs})

  def debug(self, message: str, **kwargs: Any) -> None:
    self.logger.debug(message, **SensitiveDataFilter.filter_sensitive_data(kwargs))

  def info(self, message: str, **kwargs: Any) -> None:
    self.logger.info(message, **SensitiveDataFilter.filter_sensitive_data(kwargs))

  def warning(self, message: str, **kwargs: Any) -> None:
    self.logger.warning(message, **SensitiveDataFilter.filter_sensitive_data(kwargs))

  def error(self, message: str, **kwargs: Any) -> None:
    self.logger.error(message, **SensitiveDataFilter.filter_sensitive_data(kwargs))

  def log_request(
    self,
    method: str,
    url: str,
    attempt: int,
    request_size: int,
    **kwargs: Any
  ) -> None:
    """Log the start of one attempt.

    Args:
      method: HTTP method
      url: Request URL
      attempt: Attempt number (1-based)
      request_size: Size of the request body in bytes
      **kwargs: Additional context
    """
    self.debug(
      "Chat completion attempt started",
      event_type="chat_request",
      method=method,
      url=url,
      attempt=attempt,
      request_size=request_size,
      **kwargs
    )

  def log_response(
    self,
    status_code: int,
    attempt: int,
    latency_ms: int,
    request_id: Optional[str] = None,
    **kwargs: Any
  ) -> None:
    """Log an HTTP response received for an attempt.

    Args:
      status_code: HTTP status code
      attempt: Attempt number (1-based)
      latency_ms: Latency of this attempt in milliseconds
      request_id: Server-assigned request identifier, if any
      **kwargs: Additional context
    """
    context = {
      "event_type": "chat_response",
      "status_code": status_code,
      "attempt": attempt,
      "latency_ms": latency_ms,
      **kwargs
    }
    if request_id:
      context["request_id"] = request_id

    if status_code >= 400:
      self.warning("Chat completion attempt failed", **context)
    else:
      self.info("Chat completion attempt succeeded", **context)

  def log_retry(
    self,
    attempt: int,
    delay: float,
    reason: str,
    **kwargs: Any
  ) -> None:
    """Log a scheduled retry.

    Args:
      attempt: Attempt that failed (1-based)
      delay: Backoff delay in seconds before the next attempt
      reason: Short description of the failure
      **kwargs: Additional context
    """
    self.warning(
      "Retrying chat completion",
      event_type="chat_retry",
      attempt=attempt,
      delay_seconds=round(delay, 3),
      reason=reason,
      **kwargs
    )

  def log_failure(
    self,
    error: Exception,
    attempt: int,
    duration_ms: int,
    **kwargs: Any
  ) -> None:
    """Log a call that ended with an error."""
    self.error(
      "Chat completion failed",
      event_type="chat_failure",
      error_kind=getattr(error, "kind", type(error).__name__),
      error=str(error),
      attempt=attempt,
      duration_ms=duration_ms,
      **kwargs
    )


def get_logger(name: str, **context: Any) -> ChatLogger:
  """Get a ChatLogger instance with optional bound context."""
  return ChatLogger(name, **context)
