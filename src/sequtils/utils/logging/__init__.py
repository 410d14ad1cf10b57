"""
Structured logging helpers.

sequtils never configures logging on import. Applications that want the
library's dispatch logs call one of the setup functions once at startup; they
only ever configure the ``sequtils`` logger:

    from sequtils.utils.logging import setup_logging

    setup_logging(level="DEBUG", json_format=True)
"""

from .config import configure_from_env, get_logger, setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "setup_logging",
    "get_logger",
    "configure_from_env",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
