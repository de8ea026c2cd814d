"""Unit tests for logging support."""

import json
import logging
from unittest.mock import Mock

import pytest

from chat_completions.exceptions import HTTPStatusError
from chat_completions.logging import (
  ChatLogger,
  SensitiveDataFilter,
  configure_logging,
  get_logger,
)


class TestSensitiveDataFilter:
  """Test sensitive data filtering functionality."""

  def test_filter_sensitive_data_dict(self):
    """Test filtering sensitive data from dictionaries."""
    data = {
      "api_key": "sk-1234567890abcdef",
      "Authorization": "Bearer token123",
      "normal_field": "safe_value",
      "nested": {
        "openai_api_key": "sk-nested123",
        "safe_nested": "safe_value",
      },
    }

    filtered = SensitiveDataFilter.filter_sensitive_data(data)

    assert filtered["api_key"] == "sk-1...cdef"
    assert filtered["Authorization"] == "Bear...n123"
    assert filtered["normal_field"] == "safe_value"
    assert filtered["nested"]["openai_api_key"] == "sk-n...d123"
    assert filtered["nested"]["safe_nested"] == "safe_value"

  def test_filter_sensitive_data_list_and_tuple(self):
    """Test filtering inside lists and tuples."""
    data = [{"token": "abc123"}, ({"password": "secret123"}, "plain")]

    filtered = SensitiveDataFilter.filter_sensitive_data(data)

    assert filtered[0]["token"] == "[REDACTED]"
    assert isinstance(filtered[1], tuple)
    assert filtered[1][0]["password"] == "secr...t123"
    assert filtered[1][1] == "plain"

  @pytest.mark.parametrize("key", ["X-API-Key", "x api key", "client_secret", "Bearer"])
  def test_key_normalization(self, key):
    """Test that hyphens, spaces and case do not hide sensitive keys."""
    assert SensitiveDataFilter.filter_sensitive_data({key: "abcdefghijkl"})[key] == "abcd...ijkl"

  def test_none_value(self):
    assert SensitiveDataFilter.filter_sensitive_data({"api_key": None}) == {"api_key": "[NONE]"}

  def test_non_string_keys_pass_through(self):
    assert SensitiveDataFilter.filter_sensitive_data({1: "one", "model": "gpt"}) == {1: "one", "model": "gpt"}


class TestConfigureLogging:
  """Test logging configuration."""

  def test_log_level_override(self):
    configure_logging(log_level="WARNING", structured=False)

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("aiohttp").level == logging.WARNING
    assert not logging.getLogger().isEnabledFor(logging.DEBUG)

  def test_debug_mode(self):
    configure_logging(debug_mode=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger().isEnabledFor(logging.DEBUG)

  def test_log_file(self, tmp_path):
    """Test that a file handler is added when a log file is given."""
    log_file = tmp_path / "chat.log"
    configure_logging(log_level="INFO", log_file=str(log_file))

    handlers = logging.getLogger().handlers
    assert any(isinstance(h, logging.FileHandler) for h in handlers)

  def test_structured_output_masks_secrets(self, capsys):
    """Test that rendered JSON events carry masked secrets only."""
    configure_logging(log_level="INFO", structured=True)

    get_logger("chat_completions.test").info("Sending", api_key="sk-1234567890abcdef")

    event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert event["event"] == "Sending"
    assert event["level"] == "info"
    assert event["api_key"] == "sk-1...cdef"


class TestChatLogger:
  """Test ChatLogger helpers."""

  @pytest.fixture
  def chat_logger(self):
    chat_logger = get_logger("chat_completions.test", model="gpt-test")
    chat_logger.logger = Mock()
    return chat_logger

  def test_bind_keeps_context(self):
    """Test that bind returns a new logger with merged context."""
    base = ChatLogger("chat_completions.test", model="gpt-test")
    bound = base.bind(call="abc")

    assert bound is not base
    assert bound.context == {"model": "gpt-test", "call": "abc"}
    assert base.context == {"model": "gpt-test"}

  def test_log_request(self, chat_logger):
    chat_logger.log_request("POST", "https://api.example.com", attempt=1, request_size=120)

    message, kwargs = chat_logger.logger.debug.call_args.args[0], chat_logger.logger.debug.call_args.kwargs
    assert message == "Chat completion attempt started"
    assert kwargs["event_type"] == "chat_request"
    assert kwargs["attempt"] == 1
    assert kwargs["request_size"] == 120

  def test_log_response_success(self, chat_logger):
    chat_logger.log_response(200, attempt=1, latency_ms=35, request_id="req_1")

    kwargs = chat_logger.logger.info.call_args.kwargs
    assert kwargs["status_code"] == 200
    assert kwargs["request_id"] == "req_1"
    chat_logger.logger.warning.assert_not_called()

  def test_log_response_failure_is_warning(self, chat_logger):
    chat_logger.log_response(503, attempt=2, latency_ms=10)

    kwargs = chat_logger.logger.warning.call_args.kwargs
    assert kwargs["status_code"] == 503
    assert "request_id" not in kwargs

  def test_log_retry(self, chat_logger):
    chat_logger.log_retry(attempt=1, delay=0.53217, reason="HTTP 429", retry_after=None)

    kwargs = chat_logger.logger.warning.call_args.kwargs
    assert kwargs["event_type"] == "chat_retry"
    assert kwargs["delay_seconds"] == 0.532
    assert kwargs["reason"] == "HTTP 429"

  def test_log_failure(self, chat_logger):
    chat_logger.log_failure(HTTPStatusError(404, "missing"), attempt=1, duration_ms=40)

    kwargs = chat_logger.logger.error.call_args.kwargs
    assert kwargs["error_kind"] == "http"
    assert kwargs["error"] == "HTTP 404: missing"
    assert kwargs["duration_ms"] == 40

  def test_sensitive_kwargs_filtered(self, chat_logger):
    chat_logger.info("Sending", authorization="Bearer sk-1234567890")

    assert chat_logger.logger.info.call_args.kwargs["authorization"] == "Bear...7890"
