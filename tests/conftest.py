"""
Pytest configuration and shared fixtures for sequtils tests.
"""

import threading
from collections import Counter

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from sequtils.config import reset_settings

_SETTINGS_ENV = (
    "SEQUTILS_MAX_WORKERS",
    "SEQUTILS_METRICS_ENABLED",
    "SEQUTILS_TRACING_ENABLED",
)


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "timing: asserts on wall-clock durations")


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Run every test against default settings."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


class CallRecorder:
    """Thread-safe stand-in for Mock when calls arrive from worker threads."""

    def __init__(self, side_effect=None):
        self._lock = threading.Lock()
        self._side_effect = side_effect
        self.calls: list[tuple] = []
        self.threads: set[str] = set()

    def __call__(self, *args):
        with self._lock:
            self.calls.append(args)
            self.threads.add(threading.current_thread().name)
        if self._side_effect is not None:
            return self._side_effect(*args)
        return None

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.calls)

    def args_counter(self) -> Counter:
        with self._lock:
            return Counter(args[0] if len(args) == 1 else args for args in self.calls)


@pytest.fixture
def recorder():
    """Factory for CallRecorder instances."""
    return CallRecorder


@pytest.fixture(scope="session")
def span_exporter() -> InMemorySpanExporter:
    """In-memory exporter attached to the global tracer provider."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    return exporter


@pytest.fixture
def spans(span_exporter):
    """Clear captured spans before the test and hand back the exporter."""
    span_exporter.clear()
    yield span_exporter
    span_exporter.clear()
