"""
Prometheus registration helpers.
"""

from typing import Callable, TypeVar

from prometheus_client import REGISTRY, CollectorRegistry

T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Create a collector, or return the one already registered under the name.

    Module reloads (and test collection importing a module twice) would
    otherwise raise ``ValueError: Duplicated timeseries``.

    Example:
        ITEMS = get_or_create_metric(
            lambda: Counter("items_total", "Items processed", ["status"]),
            "items_total",
        )
    """
    try:
        return metric_factory()
    except ValueError:
        existing = registry._names_to_collectors.get(metric_name)
        if existing is not None:
            return existing
        raise
