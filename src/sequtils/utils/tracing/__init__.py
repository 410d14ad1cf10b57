"""
Distributed tracing using OpenTelemetry.

Parallel dispatches open a span per call; they are no-ops until a tracer
provider is installed:

    from sequtils.utils.tracing import initialize_tracing
    initialize_tracing(service_name="my-service", otlp_endpoint="localhost:4317")
"""

from .context import add_span_attributes, add_span_event, trace_operation
from .decorators import trace_function
from .tracer import get_tracer, initialize_tracing, shutdown_tracing

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "trace_operation",
    "trace_function",
    "add_span_attributes",
    "add_span_event",
]
