"""
Logger wrappers.

Provides ContextLogger, which attaches a fixed set of key/value pairs to
every record it emits.
"""

import logging
from typing import Any


class ContextLogger:
    """
    Logger wrapper that adds contextual information to all log messages

    Usage:
        logger = ContextLogger(__name__, operation="parallel_for_each")
        logger.info("Dispatch started", item_count=12)
        # Record carries both operation and item_count
    """

    def __init__(self, name: str, **context):
        self.logger = logging.getLogger(name)
        self.context = context

    def _log(self, level: int, msg: str, *args, exc_info=None, **kwargs) -> None:
        if not self.logger.isEnabledFor(level):
            return
        extra = {**self.context, **kwargs}
        self.logger.log(level, msg, *args, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, exc_info=None, **kwargs) -> None:
        self._log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def critical(self, msg: str, *args, exc_info=None, **kwargs) -> None:
        self._log(logging.CRITICAL, msg, *args, exc_info=exc_info, **kwargs)

    def bind(self, **context) -> "ContextLogger":
        """Return a new logger with ``context`` merged over this one's."""
        return ContextLogger(self.logger.name, **{**self.context, **context})

    def update_context(self, **context) -> None:
        self.context.update(context)

    def get_context(self) -> dict[str, Any]:
        return self.context.copy()
