"""
Logging utilities for AuthShop.

Provides:
- get_logger(): Get a configured logger instance
- setup_logging(): Re-exported from shared.logging_config
"""

from __future__ import annotations

import structlog
from structlog.stdlib import BoundLogger

from shared.logging_config import setup_logging


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("login_success", user_id="123")
    """
    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]
