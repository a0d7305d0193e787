"""Configuration package."""

from config.settings import settings, Settings, LLMProvider
from config.logging_config import setup_logging, get_logger

__all__ = ["settings", "Settings", "LLMProvider", "setup_logging", "get_logger"]
