"""Credential providers for the bearer secret sent with each call."""

import os
from typing import Callable

from chat_completions.exceptions import ConfigurationError

CredentialProvider = Callable[[], str]


def static_credential(secret: str) -> CredentialProvider:
  """Wrap a fixed secret as a credential provider."""
  if not secret:
    raise ConfigurationError("API key cannot be empty", field="api_key")

  def provider() -> str:
    return secret

  return provider


def environment_credential(name: str = "OPENAI_API_KEY") -> CredentialProvider:
  """Build a provider that reads the secret from an environment variable.

  The variable is read on every invocation, so a rotated value is picked up
  by the next call.

  Args:
    name: Environment variable holding the secret

  Returns:
    Credential provider raising ConfigurationError when the variable is unset
  """
  def provider() -> str:
    value = os.getenv(name)
    if not value:
      raise ConfigurationError(f"Environment variable '{name}' is not set", field=name)
    return value

  return provider
