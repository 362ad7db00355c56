"""
Central logging configuration for caribbean_almanac.

Sets the root and package log levels, honours environment overrides for
troubleshooting, and installs a colorized console handler when the host
application has not configured one.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

PACKAGE_LOGGER = "caribbean_almanac"

# Readable colorized format: HH:MM:SS  LEVEL   logger.name: message
LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

_TRUTHY = ("1", "true", "yes", "on")


def _build_console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt="%H:%M:%S", log_colors=LOG_COLORS))
    return handler


def configure_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    level_name: Optional[str] = None,
) -> None:
    """
    Configure logging for caribbean_almanac.

    Args:
        debug_mode: Whether to enable debug logging for almanac modules
        force_debug: Override debug mode setting (None to use env var detection)
        level_name: Root level name from configuration (e.g. "WARNING")

    Environment Variables:
        ALMANAC_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        ALMANAC_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("ALMANAC_DEBUG", "").strip().lower() in _TRUTHY
    env_log_level = os.getenv("ALMANAC_LOG_LEVEL", "").strip().upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if not final_debug and level_name:
        root_level = getattr(logging, level_name.upper(), root_level)
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a handler if none exist so host applications keep their setup
    if not root_logger.handlers:
        root_logger.addHandler(_build_console_handler(root_level))

    package_level = logging.DEBUG if final_debug else root_level
    logging.getLogger(PACKAGE_LOGGER).setLevel(package_level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s, %s=%s",
        logging.getLevelName(root_level),
        PACKAGE_LOGGER,
        logging.getLevelName(package_level),
    )


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    return {
        "root": logging.getLevelName(logging.getLogger().level),
        PACKAGE_LOGGER: logging.getLevelName(logging.getLogger(PACKAGE_LOGGER).level),
    }
