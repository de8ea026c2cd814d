"""Data models for client configuration, call parameters and request status."""

from dataclasses import dataclass, fields
from typing import Any, Optional

from .exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_USER_AGENT = "chat-completions-python/1.0"


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for a ChatClient, immutable for the client's lifetime."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    max_retries: int = 2
    user_agent: Optional[str] = DEFAULT_USER_AGENT

    def __post_init__(self):
        """Validate client configuration after initialization."""
        if not self.base_url:
            raise ConfigurationError("Base URL cannot be empty", field="base_url")

        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive", field="timeout")

        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ConfigurationError(
                "Max retries must be an integer", field="max_retries"
            )

        if self.max_retries < 0:
            raise ConfigurationError(
                "Max retries cannot be negative", field="max_retries"
            )

    @classmethod
    def from_dict(
        cls, config_dict: dict[str, Any], config_file: str = ""
    ) -> "ClientConfig":
        """Create ClientConfig from dictionary.

        Args:
          config_dict: Configuration dictionary
          config_file: Source file path for error reporting

        Returns:
          ClientConfig instance

        Raises:
          ConfigurationError: If the dictionary has unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown client configuration keys: {unknown}",
                config_file=config_file or None,
                field=unknown[0],
            )

        try:
            return cls(**config_dict)
        except ConfigurationError as e:
            e.config_file = config_file or None
            raise
        except TypeError as e:
            raise ConfigurationError(
                f"Invalid client configuration: {e}", config_file=config_file or None
            ) from e


@dataclass(frozen=True)
class ChatRequest:
    """Parameters for a single chat-completion call."""

    system: str
    user: str
    temperature: float = 0.0
    structured_output: bool = False


@dataclass(frozen=True)
class RequestStatus:
    """Metadata about a successful call."""

    http_status: int
    request_id: Optional[str]
    retries: int
    duration_ms: int

    def __str__(self) -> str:
        return (
            f"HTTP {self.http_status}, retries={self.retries}, "
            f"duration={self.duration_ms}ms, request_id={self.request_id}"
        )
