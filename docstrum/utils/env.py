"""Environment and utility functions."""

import logging
import os
import sys

from ..config import LOG_DATE_FORMAT, LOG_FORMAT

LOG_LEVEL_ENV = "DOCSTRUM_LOG_LEVEL"

# Default log file location (None keeps logging on the console only)
DEFAULT_LOG_FILE = None


def resolve_log_level(verbose: bool = False) -> int:
    """Pick the log level from the verbose flag or DOCSTRUM_LOG_LEVEL.

    The flag wins; an unknown level name in the environment falls back
    to INFO with a warning.
    """
    if verbose:
        return logging.DEBUG

    name = os.getenv(LOG_LEVEL_ENV)
    if not name:
        return logging.INFO

    level = logging.getLevelName(name.strip().upper())
    if isinstance(level, int):
        return level

    logging.getLogger(__name__).warning(f"Ignoring unknown {LOG_LEVEL_ENV}={name!r}")
    return logging.INFO


def setup_logging(level: int = logging.INFO, log_file: str | None = DEFAULT_LOG_FILE) -> None:
    """Set up logging configuration.

    Logs are written to the console (stderr) and optionally a file.

    Args:
        level: Logging level
        log_file: Path to log file (None to disable file logging)
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            handlers.append(file_handler)
        except (OSError, PermissionError) as e:
            # Fall back to console-only if file logging fails
            print(f"Warning: Could not open log file '{log_file}': {e}", file=sys.stderr)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True  # Replace any existing handlers
    )
