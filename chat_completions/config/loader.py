"""Configuration loader with YAML parsing and environment variable resolution."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import ConfigurationError
from ..models import ClientConfig

ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ConfigLoader:
  """Loads ClientConfig instances from YAML files.

  A configuration file holds the client settings either under a top-level
  ``client`` key or directly at the top level:

    client:
      base_url: ${CHAT_BASE_URL}
      timeout: 20
      max_retries: 3

  String values may reference environment variables in ``${VAR}`` form.
  """

  def __init__(self, config_dir: Path):
    """Initialize ConfigLoader with configuration directory.

    Args:
      config_dir: Path to directory containing configuration files
    """
    self.config_dir = Path(config_dir)

  def load_config(self, config_name: str = "default-client") -> ClientConfig:
    """Load configuration from specified file.

    Args:
      config_name: Name of configuration file without .yaml extension

    Returns:
      ClientConfig with environment variables resolved

    Raises:
      ConfigurationError: If file not found, invalid YAML, or environment variables missing
    """
    config_file = self._find_config_file(config_name)

    try:
      with open(config_file, 'r', encoding='utf-8') as f:
        config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
      raise ConfigurationError(
        f"Invalid YAML in configuration file: {e}",
        config_file=str(config_file)
      ) from e
    except OSError as e:
      raise ConfigurationError(
        f"Error reading configuration file: {e}",
        config_file=str(config_file)
      ) from e

    if config_dict is None:
      raise ConfigurationError(
        "Configuration file is empty",
        config_file=str(config_file)
      )

    if not isinstance(config_dict, dict):
      raise ConfigurationError(
        "Configuration file must contain a YAML dictionary",
        config_file=str(config_file)
      )

    client_section = config_dict.get("client", config_dict)
    if not isinstance(client_section, dict):
      raise ConfigurationError(
        "Client section must be a dictionary",
        config_file=str(config_file),
        field="client"
      )

    try:
      resolved = self._resolve_environment_variables(client_section)
    except ConfigurationError as e:
      e.config_file = str(config_file)
      raise

    return ClientConfig.from_dict(resolved, str(config_file))

  def list_available_configs(self) -> list[str]:
    """List all available configuration files in the config directory.

    Returns:
      Sorted configuration names without extension

    Raises:
      ConfigurationError: If config directory doesn't exist
    """
    if not self.config_dir.is_dir():
      raise ConfigurationError(
        f"Configuration directory not found: {self.config_dir}"
      )

    names = {
      path.stem
      for pattern in ("*.yaml", "*.yml")
      for path in self.config_dir.glob(pattern)
      if path.is_file()
    }
    return sorted(names)

  def _find_config_file(self, config_name: str) -> Path:
    for suffix in (".yaml", ".yml"):
      candidate = self.config_dir / f"{config_name}{suffix}"
      if candidate.exists():
        return candidate

    raise ConfigurationError(
      f"Configuration file not found: {self.config_dir / f'{config_name}.yaml'}",
      config_file=str(self.config_dir / f"{config_name}.yaml")
    )

  def _resolve_environment_variables(self, config_dict: dict[str, Any]) -> dict[str, Any]:
    """Resolve ${VAR} patterns in string values with environment variables.

    Raises:
      ConfigurationError: If a referenced environment variable is missing
    """

    def resolve_value(value: Any, field: str) -> Any:
      if isinstance(value, str):
        resolved_value = value
        for var_name in ENV_PATTERN.findall(value):
          env_value = os.getenv(var_name)
          if env_value is None:
            raise ConfigurationError(
              f"Environment variable '{var_name}' is not set",
              field=field
            )
          resolved_value = resolved_value.replace(f"${{{var_name}}}", env_value)
        return resolved_value
      elif isinstance(value, dict):
        return {k: resolve_value(v, f"{field}.{k}") for k, v in value.items()}
      elif isinstance(value, list):
        return [resolve_value(item, field) for item in value]
      return value

    return {key: resolve_value(value, key) for key, value in config_dict.items()}
