"""Configuration management for the chat-completions client."""

from .loader import ConfigLoader
from ..models import ClientConfig

__all__ = [
    "ConfigLoader",
    "ClientConfig",
]
