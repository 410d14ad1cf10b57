"""
Data-parallel helpers.

- ParallelSequence / as_parallel: an iterable configured for parallel
  consumption (degree of parallelism, cancellation, projections)
- parallel_for_each / parallel_to_bag: run an action, or collect into a
  ConcurrentBag, on a thread pool
- for_all_async*: launch an async operation per element and await them all
- Prometheus metrics for dispatches

No ordering guarantee is provided anywhere in this package.
"""

from .fanout import (
    for_all_async,
    for_all_async_with_cancellation,
    for_all_async_with_state,
)
from .foreach import parallel_for_each, parallel_to_bag
from .metrics import get_parallel_stats
from .query import ParallelSequence, as_parallel

__all__ = [
    "ParallelSequence",
    "as_parallel",
    "parallel_for_each",
    "parallel_to_bag",
    "for_all_async",
    "for_all_async_with_state",
    "for_all_async_with_cancellation",
    "get_parallel_stats",
]
