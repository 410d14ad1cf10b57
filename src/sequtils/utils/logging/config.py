"""
Routing for the library's own log records.

Every sequtils module logs below the ``sequtils`` logger. ``setup_logging``
attaches console and/or rotating-file handlers to that logger only; the host
application's root logger and its handlers are never touched:

    from sequtils.utils.logging import setup_logging
    setup_logging(level="DEBUG", json_format=True)
"""

import logging
import logging.handlers
import os
import sys

from sequtils.config import env_bool

from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

LIBRARY_LOGGER = "sequtils"

# Marks handlers installed here, so shutdown leaves the host's handlers alone
_OWNED_ATTR = "_sequtils_owned"


def _owned_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, _OWNED_ATTR, False)]


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
    json_format: bool = False,
    propagate: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Send sequtils log records to the console and/or a rotating file.

    Calling it again replaces the handlers a previous call installed.

    Args:
        level: Log level for the ``sequtils`` logger; unknown names mean INFO
        log_file: Path to log file (if None, file logging is disabled)
        console_output: Write to stderr
        json_format: Use JSONFormatter for every handler
        propagate: Also pass records up to the root logger. Forced on when
            neither output is enabled, so records are not silently dropped
        max_bytes: Maximum log file size before rotation
        backup_count: Number of rotated log files to keep

    Returns:
        The configured ``sequtils`` logger
    """
    numeric_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    shutdown_logging()
    logger = logging.getLogger(LIBRARY_LOGGER)
    logger.setLevel(numeric_level)

    handlers: list[logging.Handler] = []

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        if json_format:
            console_handler.setFormatter(JSONFormatter(app_name=LIBRARY_LOGGER))
        else:
            console_handler.setFormatter(ConsoleFormatter(use_colors=True))
        handlers.append(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        if json_format:
            file_handler.setFormatter(JSONFormatter(app_name=LIBRARY_LOGGER))
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    fmt="%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(numeric_level)
        setattr(handler, _OWNED_ATTR, True)
        logger.addHandler(handler)

    logger.propagate = propagate or not handlers

    logger.debug(
        f"Logging initialized: level={logging.getLevelName(numeric_level)}, "
        f"file={log_file or 'none'}, console={console_output}, json={json_format}"
    )
    return logger


def get_logger(name: str, **context) -> ContextLogger:
    """
    Get a ContextLogger for ``name`` carrying ``context`` on every record.

    Library modules pass ``__name__``, which places them below the
    ``sequtils`` logger configured by ``setup_logging``.
    """
    return ContextLogger(name, **context)


def shutdown_logging() -> None:
    """
    Detach and close the handlers ``setup_logging`` installed, and hand the
    ``sequtils`` logger back to normal propagation.

    Handlers the application added itself are left in place.
    """
    logger = logging.getLogger(LIBRARY_LOGGER)

    for handler in _owned_handlers(logger):
        logger.removeHandler(handler)
        handler.close()

    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def configure_from_env() -> logging.Logger:
    """
    Configure library logging from environment variables

    Environment variables:
        SEQUTILS_LOG_LEVEL: Log level (default: INFO)
        SEQUTILS_LOG_FILE: Log file path (default: none)
        SEQUTILS_LOG_JSON: Use JSON format (default: false)
        SEQUTILS_LOG_CONSOLE: Enable console output (default: true)

    Raises:
        ConfigurationError: a boolean variable holds something other than
            true/1/yes or false/0/no
    """
    return setup_logging(
        level=os.getenv("SEQUTILS_LOG_LEVEL", "INFO"),
        log_file=os.getenv("SEQUTILS_LOG_FILE") or None,
        console_output=env_bool("SEQUTILS_LOG_CONSOLE", True),
        json_format=env_bool("SEQUTILS_LOG_JSON", False),
    )
