"""Core utilities for the edge server."""

from bridgegate.app.core.config import settings
from bridgegate.app.core.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
]
