"""Centralized logging configuration for the seaplane CLI.

Sets up standard Python logging with appropriate levels, formatters and
handlers. Log records go to stderr so they never mix with command output.
"""

import logging
import sys
from typing import Optional

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = None

# Loggers of third party libraries that are only useful when tracing the wire.
WIRE_LOGGERS = ("httpx", "httpcore")


def level_for_verbosity(verbose: int = 0, quiet: int = 0) -> int:
    """Maps repeated -v / -q flags onto a logging level."""
    if verbose:
        return logging.DEBUG
    if quiet >= 2:
        return logging.CRITICAL
    if quiet == 1:
        return logging.ERROR
    return DEFAULT_LOG_LEVEL


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = DEFAULT_LOG_FILE,
    wire_logs: bool = False,
) -> None:
    """Configures the root logger for the application.

    Args:
        log_level: The minimum logging level (e.g., logging.DEBUG, logging.INFO).
        log_format: The format string for log messages.
        log_file: Optional path to a file for logging output.
        wire_logs: Let httpx/httpcore log below WARNING as well.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers attached to the root logger
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
        except OSError as e:
            logging.error(f"Failed to set up file logging to {log_file}: {e}")
        else:
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logging.info(f"Logging to file: {log_file}")

    for name in WIRE_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if wire_logs else max(log_level, logging.WARNING))

    logging.debug(f"Logging configured. Level={logging.getLevelName(log_level)}")
