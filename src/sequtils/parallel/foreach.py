"""
Parallel for-each and parallel collection into a bag.
"""

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from sequtils.bag import ConcurrentBag

from .query import ParallelSequence, as_parallel

T = TypeVar("T")


def parallel_for_each(source: Iterable[T], action: Callable[[T], Any]) -> None:
    """
    Execute ``action`` in parallel on every element of ``source``.

    When ``source`` is a ``ParallelSequence`` its configuration (degree of
    parallelism, cancellation, projections) is respected; any other iterable
    is dispatched with the default worker count.

    No ordering or thread-safety guarantee is provided.

    Raises:
        ExceptionGroup: every exception raised by ``action``
        CancellationError: ``source`` carries a token that was cancelled
    """
    if isinstance(source, ParallelSequence):
        source.for_all(action)
    else:
        as_parallel(source).for_all(action)


def parallel_to_bag(source: Iterable[T]) -> ConcurrentBag[T]:
    """
    Create a ``ConcurrentBag`` holding every element of ``source``, added in
    parallel via ``parallel_for_each``.

    No ordering guarantee is provided.
    """
    bag: ConcurrentBag[T] = ConcurrentBag()
    parallel_for_each(source, bag.add)
    return bag
