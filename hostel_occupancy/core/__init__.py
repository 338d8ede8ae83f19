"""Core application modules."""

from .config import get_settings, settings
from .logging import get_logger, setup_logging

__all__ = ["get_settings", "settings", "get_logger", "setup_logging"]
