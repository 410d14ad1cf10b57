"""
Decorators that wrap calls in a span.
"""

import functools
import inspect

from .context import trace_operation


def trace_function(operation_name: str | None = None, **default_attributes):
    """
    Decorator for tracing function calls. Coroutine functions are traced
    across their whole await, not just coroutine creation.

    Args:
        operation_name: Optional span name (defaults to module.qualname)
        **default_attributes: Attributes added to every span

    Example:
        >>> @trace_function(component="loader")
        ... async def load(item):
        ...     ...
    """
    def decorator(func):
        name = operation_name or f"{func.__module__}.{func.__qualname__}"
        attributes = {**default_attributes, "function": func.__name__}

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                with trace_operation(name, **attributes):
                    return await func(*args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with trace_operation(name, **attributes):
                return func(*args, **kwargs)

        return wrapper
    return decorator
