"""
Tracer setup for OpenTelemetry.

The library only ever asks the global tracer provider for a tracer, so spans
are no-ops until the application installs a provider, either its own or the
one built by ``initialize_tracing``.
"""

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "sequtils"

_provider: TracerProvider | None = None


def initialize_tracing(
    service_name: str = "sequtils",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
    sampling_rate: float = 1.0,
) -> trace.Tracer:
    """
    Install an SDK tracer provider with the requested exporters.

    Args:
        service_name: Name of the service for identification
        otlp_endpoint: OTLP collector endpoint (e.g. "localhost:4317");
            falls back to the OTLP_ENDPOINT environment variable
        console_export: Also export spans to stdout (debugging)
        sampling_rate: Sampling ratio 0.0-1.0

    Returns:
        The library tracer bound to the new provider

    Example:
        >>> tracer = initialize_tracing(console_export=True)
    """
    global _provider

    if _provider is not None:
        logger.warning("Tracing already initialized, returning existing tracer")
        return get_tracer()

    provider = TracerProvider(
        resource=Resource(attributes={SERVICE_NAME: service_name}),
        sampler=TraceIdRatioBased(sampling_rate),
    )

    exporters = []

    otlp_endpoint = otlp_endpoint or os.getenv("OTLP_ENDPOINT")
    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
        exporters.append("OTLP")
        logger.info(f"OTLP exporter configured: {otlp_endpoint}")

    if console_export or os.getenv("TRACE_CONSOLE", "").lower() == "true":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        exporters.append("Console")

    if not exporters:
        logger.warning("No trace exporters configured, spans will be dropped")

    trace.set_tracer_provider(provider)
    _provider = provider

    logger.info(
        f"Tracing initialized: {service_name} "
        f"(exporters: {', '.join(exporters) or 'none'}, sampling: {sampling_rate})"
    )

    return get_tracer()


def get_tracer() -> trace.Tracer:
    """Return the library tracer from the current global provider."""
    return trace.get_tracer(INSTRUMENTATION_NAME)


def shutdown_tracing() -> None:
    """Flush and shut down the provider installed by ``initialize_tracing``."""
    global _provider

    if _provider is None:
        return

    try:
        _provider.shutdown()
        logger.info("Tracing shutdown complete")
    finally:
        _provider = None
