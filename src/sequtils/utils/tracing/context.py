"""
Span context managers and helpers for the current span.
"""

from contextlib import contextmanager

from opentelemetry import trace

from .tracer import get_tracer


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes
):
    """
    Run the enclosed block inside a new span.

    Attributes are stringified. An exception escaping the block is recorded on
    the span (``error``, ``error.type``, ``error.message`` plus the exception
    event) and re-raised.

    Example:
        >>> with trace_operation("parallel_for_each", max_workers=4) as span:
        ...     run()
        ...     span.set_attribute("items", "12")
    """
    tracer = get_tracer()

    with tracer.start_as_current_span(
        operation_name,
        kind=kind,
        record_exception=False,
    ) as span:
        for key, value in attributes.items():
            span.set_attribute(key, str(value))

        try:
            yield span
        except BaseException as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)
            span.set_attribute("error.message", str(e))
            span.record_exception(e)
            raise


def add_span_attributes(**attributes):
    """Set stringified attributes on the current span, if it is recording."""
    current_span = trace.get_current_span()
    if current_span.is_recording():
        for key, value in attributes.items():
            current_span.set_attribute(key, str(value))


def add_span_event(name: str, **attributes):
    """
    Add an event to the current span.

    Example:
        >>> with trace_operation("for_all_async"):
        ...     add_span_event("dispatch_completed", launched=3)
    """
    current_span = trace.get_current_span()
    if current_span.is_recording():
        attrs = {k: str(v) for k, v in attributes.items()}
        current_span.add_event(name, attributes=attrs)
