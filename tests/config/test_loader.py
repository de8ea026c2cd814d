"""Unit tests for ConfigLoader class."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from chat_completions.config.loader import ConfigLoader
from chat_completions.exceptions import ConfigurationError
from chat_completions.models import ClientConfig


class TestConfigLoader:
  """Test cases for ConfigLoader class."""

  @pytest.fixture
  def temp_config_dir(self):
    """Create temporary directory for test configuration files."""
    with tempfile.TemporaryDirectory() as temp_dir:
      yield Path(temp_dir)

  @pytest.fixture
  def config_loader(self, temp_config_dir):
    """Create ConfigLoader instance with temporary directory."""
    return ConfigLoader(temp_config_dir)

  def write_config(self, directory, name, content):
    path = directory / name
    if isinstance(content, str):
      path.write_text(content, encoding="utf-8")
    else:
      path.write_text(yaml.dump(content), encoding="utf-8")
    return path

  def test_init_creates_config_loader_with_directory(self, temp_config_dir):
    """Test that ConfigLoader initializes with correct directory."""
    loader = ConfigLoader(temp_config_dir)
    assert loader.config_dir == temp_config_dir

  def test_load_config_with_client_section(self, config_loader, temp_config_dir):
    """Test loading settings nested under a client key."""
    self.write_config(temp_config_dir, "default-client.yaml", {
      "client": {
        "base_url": "http://localhost:8080/v1",
        "timeout": 12.5,
        "max_retries": 4,
        "user_agent": "benchmark/2.0",
      }
    })

    config = config_loader.load_config()

    assert config == ClientConfig(
      base_url="http://localhost:8080/v1",
      timeout=12.5,
      max_retries=4,
      user_agent="benchmark/2.0",
    )

  def test_load_config_top_level_keys(self, config_loader, temp_config_dir):
    """Test loading settings written at the top level."""
    self.write_config(temp_config_dir, "local.yaml", {"timeout": 5, "max_retries": 0})

    config = config_loader.load_config("local")

    assert config.timeout == 5
    assert config.max_retries == 0
    assert config.base_url == ClientConfig().base_url

  def test_load_config_yml_extension(self, config_loader, temp_config_dir):
    """Test that .yml files are found when no .yaml file exists."""
    self.write_config(temp_config_dir, "short.yml", {"client": {"timeout": 7}})

    assert config_loader.load_config("short").timeout == 7

  def test_load_config_resolves_environment_variables(self, config_loader, temp_config_dir):
    """Test that ${VAR} references are replaced with environment values."""
    self.write_config(temp_config_dir, "env.yaml", {
      "client": {"base_url": "https://${CHAT_TEST_HOST}/v1"}
    })

    with patch.dict(os.environ, {"CHAT_TEST_HOST": "llm.internal.example"}):
      config = config_loader.load_config("env")

    assert config.base_url == "https://llm.internal.example/v1"

  def test_load_config_missing_environment_variable(self, config_loader, temp_config_dir):
    """Test that a missing variable is reported with file and field."""
    path = self.write_config(temp_config_dir, "env.yaml", {
      "client": {"base_url": "${CHAT_TEST_UNSET_VARIABLE}"}
    })

    with patch.dict(os.environ, {}, clear=True):
      with pytest.raises(ConfigurationError, match="CHAT_TEST_UNSET_VARIABLE") as exc_info:
        config_loader.load_config("env")

    assert exc_info.value.config_file == str(path)
    assert exc_info.value.field == "base_url"

  def test_load_config_file_not_found(self, config_loader):
    """Test that a missing file raises ConfigurationError."""
    with pytest.raises(ConfigurationError, match="Configuration file not found"):
      config_loader.load_config("does-not-exist")

  def test_load_config_invalid_yaml(self, config_loader, temp_config_dir):
    """Test that malformed YAML raises ConfigurationError."""
    self.write_config(temp_config_dir, "broken.yaml", "client: [unclosed\n")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
      config_loader.load_config("broken")

  def test_load_config_empty_file(self, config_loader, temp_config_dir):
    self.write_config(temp_config_dir, "empty.yaml", "")

    with pytest.raises(ConfigurationError, match="empty"):
      config_loader.load_config("empty")

  def test_load_config_not_a_dictionary(self, config_loader, temp_config_dir):
    self.write_config(temp_config_dir, "list.yaml", "- a\n- b\n")

    with pytest.raises(ConfigurationError, match="YAML dictionary"):
      config_loader.load_config("list")

  def test_load_config_client_section_not_a_dictionary(self, config_loader, temp_config_dir):
    self.write_config(temp_config_dir, "bad.yaml", "client: 42\n")

    with pytest.raises(ConfigurationError) as exc_info:
      config_loader.load_config("bad")

    assert exc_info.value.field == "client"

  def test_load_config_unknown_key(self, config_loader, temp_config_dir):
    """Test that unknown settings are rejected."""
    path = self.write_config(temp_config_dir, "extra.yaml", {
      "client": {"timeout": 5, "retries": 3}
    })

    with pytest.raises(ConfigurationError, match="retries") as exc_info:
      config_loader.load_config("extra")

    assert exc_info.value.config_file == str(path)

  def test_load_config_invalid_value(self, config_loader, temp_config_dir):
    self.write_config(temp_config_dir, "neg.yaml", {"client": {"max_retries": -2}})

    with pytest.raises(ConfigurationError, match="negative"):
      config_loader.load_config("neg")

  def test_list_available_configs(self, config_loader, temp_config_dir):
    """Test listing configuration names across both extensions."""
    self.write_config(temp_config_dir, "zeta.yaml", {"timeout": 1})
    self.write_config(temp_config_dir, "alpha.yml", {"timeout": 1})
    self.write_config(temp_config_dir, "notes.txt", "not a config")

    assert config_loader.list_available_configs() == ["alpha", "zeta"]

  def test_list_available_configs_missing_directory(self, temp_config_dir):
    loader = ConfigLoader(temp_config_dir / "missing")

    with pytest.raises(ConfigurationError, match="directory not found"):
      loader.list_available_configs()
