"""
Prometheus metrics for parallel dispatch.

Labels:
    operation: ``for_all`` for thread dispatch, ``for_all_async`` for the
        awaited operations of the async fan-out
    status: ``success``, ``failed`` or ``cancelled``
"""

from prometheus_client import REGISTRY, Counter, Gauge, Histogram

from sequtils.utils.metrics import get_or_create_metric

PARALLEL_ITEMS_PROCESSED = get_or_create_metric(
    lambda: Counter(
        "sequtils_parallel_items_processed_total",
        "Elements processed by parallel dispatch",
        ["operation", "status"],
        registry=REGISTRY,
    ),
    "sequtils_parallel_items_processed",
)

PARALLEL_DISPATCH_TIME = get_or_create_metric(
    lambda: Histogram(
        "sequtils_parallel_dispatch_seconds",
        "Wall time of a parallel dispatch, from first launch to join",
        ["operation"],
        buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30, 60],
        registry=REGISTRY,
    ),
    "sequtils_parallel_dispatch_seconds",
)

PARALLEL_ACTIVE_WORKERS = get_or_create_metric(
    lambda: Gauge(
        "sequtils_parallel_active_workers",
        "Worker threads currently running an element",
        registry=REGISTRY,
    ),
    "sequtils_parallel_active_workers",
)


def get_parallel_stats() -> dict:
    """
    Snapshot of the processed-element counters.

    Example:
        >>> stats = get_parallel_stats()
        >>> stats["for_all"]["failed"]
        0.0
    """
    def sample(operation: str, status: str) -> float:
        return REGISTRY.get_sample_value(
            "sequtils_parallel_items_processed_total",
            {"operation": operation, "status": status},
        ) or 0

    return {
        "active_workers": REGISTRY.get_sample_value("sequtils_parallel_active_workers") or 0,
        **{
            operation: {
                status: sample(operation, status)
                for status in ("success", "failed", "cancelled")
            }
            for operation in ("for_all", "for_all_async")
        },
    }
