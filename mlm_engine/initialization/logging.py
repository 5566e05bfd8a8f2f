"""
Logging setup.

Configures loguru sinks for scripts and host applications.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from mlm_engine.config.settings import settings


def setup_logging(
    level: str | None = None, log_file: str | None = None
) -> None:
    """
    Configure logger with stderr output and optional file rotation.

    Args:
        level: Log level (default: LOG_LEVEL)
        log_file: Log file path (default: LOG_FILE, none if unset)
    """
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(sys.stderr, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
            encoding="utf-8",
        )
