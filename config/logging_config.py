"""Logging setup for the planner.

Two output modes: a technical format with timestamps and logger names, and a
terse business format. The level can be forced with ``ARCHIVE_LOG_LEVEL``.
"""

import logging
import os
import sys

from config.defaults import DEFAULT_LOG_LEVEL

TECHNICAL_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
BUSINESS_FORMAT = "%(levelname)s: %(message)s"

# Third-party loggers that drown out our own output
NOISY_LOGGERS = ["urllib3", "matplotlib", "PIL", "pulp", "watchdog"]


def resolve_log_level(verbose: bool = False) -> int:
    """Pick the log level from the environment, falling back to the mode default."""
    env_level = os.environ.get("ARCHIVE_LOG_LEVEL")
    if env_level:
        level = logging.getLevelName(env_level.strip().upper())
        if isinstance(level, int):
            return level
    if verbose:
        return logging.DEBUG
    return logging.getLevelName(DEFAULT_LOG_LEVEL)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure root logging once and return the application logger."""
    level = resolve_log_level(verbose)
    logging.basicConfig(
        level=level,
        format=TECHNICAL_FORMAT if verbose else BUSINESS_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger("rack_planner")
    logger.setLevel(level)
    return logger
