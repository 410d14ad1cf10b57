"""
sequtils: generic helpers over iterables

Components:
- collect: drop None values, or keep the outputs of a try-operation
- parallel: parallel for-each, parallel collection into a ConcurrentBag,
  and async fan-out with optional shared state or cancellation
- bag: ConcurrentBag, a thread-safe unordered collection
- cancellation: cooperative CancellationToken

Usage:
    from sequtils import as_parallel, collect_present, for_all_async

    values = list(collect_present([1, None, 2]))
    await for_all_async(as_parallel(urls, max_workers=8), fetch)
"""

from .bag import ConcurrentBag
from .cancellation import CancellationToken
from .collect import TryFunc, as_try_func, collect_mapped, collect_present, try_parse_int
from .exceptions import CancellationError, ConfigurationError, SequtilsError
from .parallel import (
    ParallelSequence,
    as_parallel,
    for_all_async,
    for_all_async_with_cancellation,
    for_all_async_with_state,
    parallel_for_each,
    parallel_to_bag,
)

__version__ = "1.0.0"
__all__ = [
    # Collectors
    "collect_present",
    "collect_mapped",
    "as_try_func",
    "try_parse_int",
    "TryFunc",
    # Parallel
    "ParallelSequence",
    "as_parallel",
    "parallel_for_each",
    "parallel_to_bag",
    "for_all_async",
    "for_all_async_with_state",
    "for_all_async_with_cancellation",
    # Supporting types
    "ConcurrentBag",
    "CancellationToken",
    "SequtilsError",
    "ConfigurationError",
    "CancellationError",
]
