"""
Exception types raised by sequtils itself.

Failures raised by caller-supplied actions are never wrapped in these; they
propagate inside a builtin ``ExceptionGroup``.
"""


class SequtilsError(Exception):
    """Base class for errors raised by the library."""


class ConfigurationError(SequtilsError, ValueError):
    """Invalid setting, or a parallel sequence option configured twice."""


class CancellationError(SequtilsError):
    """Raised when a task is cancelled via cancellation token."""
