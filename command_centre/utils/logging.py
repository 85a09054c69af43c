"""
Logging utilities for the Agency Command Centre backend.

Never log:
- passwords (default or chosen), access/refresh tokens, API keys
- employee CTC figures

Acceptable logging:
- High-level events (e.g., "Employee created", "Invitation stored")
- Record IDs, counts and filter values
- Sanitized error messages returned by Supabase
"""

import logging
from typing import Optional

from command_centre.config import settings


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to settings.LOG_LEVEL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)

    # Avoid duplicate handlers when the module is imported twice
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
