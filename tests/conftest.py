"""Shared fixtures for the chat-completions test suite."""

import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def restore_logging():
  """Undo configure_logging calls made by a test."""
  root = logging.getLogger()
  handlers, level = root.handlers[:], root.level
  yield
  structlog.reset_defaults()
  for handler in root.handlers:
    if handler not in handlers:
      handler.close()
  root.handlers[:] = handlers
  root.setLevel(level)
