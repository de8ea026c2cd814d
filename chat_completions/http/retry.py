"""Retry decisions and exponential backoff for chat-completion attempts."""

import asyncio
import random
from typing import Optional

from chat_completions.exceptions import RequestCancelledError


class RetryHandler:
  """Decides whether an attempt may be retried and waits before the next one."""

  def __init__(
    self,
    max_retries: int = 2,
    base_delay: float = 0.5,
    backoff_factor: float = 2.0,
    jitter_ratio: float = 0.25
  ):
    """Initialize retry handler with configuration parameters.

    Args:
      max_retries: Maximum number of retries after the first attempt
      base_delay: Delay in seconds before the first retry
      backoff_factor: Multiplier applied per attempt
      jitter_ratio: Upper bound of the random jitter, as a fraction of the delay
    """
    self.max_retries = max_retries
    self.base_delay = base_delay
    self.backoff_factor = backoff_factor
    self.jitter_ratio = jitter_ratio

  def can_retry(self, attempt: int) -> bool:
    """Check whether another attempt is allowed after ``attempt`` (1-based)."""
    return attempt <= self.max_retries

  def is_retryable_status(self, status: int) -> bool:
    """Rate limiting (429) and server errors (5xx) are retryable."""
    return status == 429 or 500 <= status < 600

  def should_retry_status(self, status: int, attempt: int) -> bool:
    """Determine if an HTTP status on the given attempt should be retried.

    Args:
      status: HTTP status code of the response
      attempt: Current attempt number (1-based)

    Returns:
      True if the status is retryable and the retry budget is not spent
    """
    return self.can_retry(attempt) and self.is_retryable_status(status)

  def compute_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
    """Calculate the wait before the next attempt.

    A server-supplied Retry-After value is used as-is. Otherwise the delay
    grows exponentially with a random jitter of up to ``jitter_ratio`` on top.

    Args:
      attempt: Attempt that just failed (1-based)
      retry_after: Server hint in seconds, if any

    Returns:
      Delay in seconds
    """
    if retry_after is not None:
      return retry_after

    delay = self.base_delay * (self.backoff_factor ** max(0, attempt - 1))
    return delay + random.uniform(0.0, delay * self.jitter_ratio)

  async def sleep(self, delay: float) -> None:
    """Wait out a backoff delay.

    Args:
      delay: Delay in seconds, as returned by compute_delay

    Raises:
      RequestCancelledError: If the task is cancelled while waiting
    """
    try:
      await asyncio.sleep(delay)
    except asyncio.CancelledError as e:
      raise RequestCancelledError(e) from e
