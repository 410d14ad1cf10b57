"""
Iterables configured for parallel consumption.

A ``ParallelSequence`` wraps a source iterable together with how it should be
consumed in parallel: the degree of parallelism, an optional cancellation
token, and a chain of projections applied on the worker threads. It is
immutable; each ``with_*``/``select`` call returns a new sequence.

    seq = as_parallel(paths, max_workers=8).select(load)
    seq.for_all(index)
"""

import time
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from contextlib import nullcontext
from typing import Any, Generic, TypeVar

from sequtils.cancellation import CancellationToken
from sequtils.config import get_settings
from sequtils.exceptions import CancellationError, ConfigurationError
from sequtils.utils.logging import get_logger
from sequtils.utils.tracing import trace_operation

from .metrics import PARALLEL_ACTIVE_WORKERS, PARALLEL_DISPATCH_TIME, PARALLEL_ITEMS_PROCESSED

logger = get_logger(__name__, component="for_all")

T = TypeVar("T")
U = TypeVar("U")

# Elements handed to the executor per worker before waiting for one to finish
_QUEUE_DEPTH_PER_WORKER = 2


class ParallelSequence(Generic[T]):
    """
    An iterable plus the options for consuming it in parallel.

    Plain iteration (``for x in seq``) is sequential and applies the
    projections in order; ``for_all`` is the parallel path.
    """

    def __init__(
        self,
        source: Iterable[Any],
        *,
        max_workers: int | None = None,
        cancellation_token: CancellationToken | None = None,
        _selectors: tuple[Callable[[Any], Any], ...] = (),
    ):
        if max_workers is not None and max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {max_workers}")
        self._source = source
        self._max_workers = max_workers
        self._cancellation_token = cancellation_token
        self._selectors = _selectors

    @property
    def max_workers(self) -> int:
        """Configured degree of parallelism, or the settings default."""
        if self._max_workers is not None:
            return self._max_workers
        return get_settings().max_workers

    @property
    def cancellation_token(self) -> CancellationToken | None:
        return self._cancellation_token

    def _replace(self, **changes) -> "ParallelSequence":
        options = {
            "max_workers": self._max_workers,
            "cancellation_token": self._cancellation_token,
            "_selectors": self._selectors,
            **changes,
        }
        return ParallelSequence(self._source, **options)

    def with_degree_of_parallelism(self, max_workers: int) -> "ParallelSequence[T]":
        if self._max_workers is not None:
            raise ConfigurationError("Degree of parallelism is already configured")
        return self._replace(max_workers=max_workers)

    def with_cancellation(self, token: CancellationToken) -> "ParallelSequence[T]":
        if self._cancellation_token is not None:
            raise ConfigurationError("Cancellation is already configured for this sequence")
        return self._replace(cancellation_token=token)

    def select(self, func: Callable[[T], U]) -> "ParallelSequence[U]":
        """Project each element through ``func`` (lazily, on the workers)."""
        return self._replace(_selectors=self._selectors + (func,))

    def _project(self, item: Any) -> Any:
        for selector in self._selectors:
            item = selector(item)
        return item

    def __iter__(self) -> Iterator[T]:
        for item in self._source:
            yield self._project(item)

    def __repr__(self) -> str:
        return (
            f"ParallelSequence(max_workers={self._max_workers}, "
            f"cancellable={self._cancellation_token is not None}, "
            f"selectors={len(self._selectors)})"
        )

    def for_all(self, action: Callable[[T], Any]) -> None:
        """
        Invoke ``action`` on every element using a thread pool.

        Elements are pulled from the source on the calling thread and handed
        to at most ``max_workers`` worker threads. Invocation order is
        unspecified and ``action`` must do its own locking.

        Once an invocation has failed, or the cancellation token is set, no
        further elements are launched; work already running is waited for.

        Raises:
            CancellationError: the configured token was cancelled
            ExceptionGroup: one or more invocations raised; holds every
                exception observed
        """
        settings = get_settings()
        token = self._cancellation_token
        max_workers = self.max_workers
        errors: list[BaseException] = []
        stats = {"success": 0, "failed": 0, "cancelled": 0}

        span = (
            trace_operation(
                "sequtils.for_all",
                max_workers=max_workers,
                cancellable=token is not None,
            )
            if settings.tracing_enabled
            else nullcontext()
        )

        with span:
            start = time.perf_counter()
            logger.debug(f"Starting parallel dispatch with {max_workers} workers")

            with ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix="sequtils"
            ) as executor:
                pending: set[Future] = set()
                limit = max_workers * _QUEUE_DEPTH_PER_WORKER

                for item in self._source:
                    if errors or (token is not None and token.cancelled):
                        break
                    if len(pending) >= limit:
                        done, pending = wait(pending, return_when=FIRST_COMPLETED)
                        self._drain(done, errors, stats)
                        if errors or (token is not None and token.cancelled):
                            break
                    pending.add(executor.submit(self._invoke, action, item, settings.metrics_enabled))

                done, _ = wait(pending)
                self._drain(done, errors, stats)

            duration = time.perf_counter() - start
            if settings.metrics_enabled:
                PARALLEL_DISPATCH_TIME.labels(operation="for_all").observe(duration)

            logger.debug(
                f"Parallel dispatch finished in {duration:.3f}s: "
                f"{stats['success']} succeeded, {stats['failed']} failed, "
                f"{stats['cancelled']} cancelled"
            )

            if token is not None and token.cancelled:
                logger.warning("Parallel dispatch cancelled")
                cause = BaseExceptionGroup("failures before cancellation", errors) if errors else None
                raise CancellationError("Parallel dispatch was cancelled") from cause

            if errors:
                raise BaseExceptionGroup(
                    f"{len(errors)} parallel invocation(s) failed", errors
                )

    def _drain(self, done: Iterable[Future], errors: list[BaseException], stats: dict) -> None:
        token = self._cancellation_token
        for future in done:
            exc = future.exception()
            if exc is None:
                stats["success"] += 1
            elif isinstance(exc, CancellationError) and token is not None and token.cancelled:
                stats["cancelled"] += 1
            else:
                stats["failed"] += 1
                errors.append(exc)

    def _invoke(self, action: Callable[[T], Any], item: Any, metrics_enabled: bool) -> None:
        token = self._cancellation_token
        if metrics_enabled:
            PARALLEL_ACTIVE_WORKERS.inc()
        try:
            if token is not None:
                token.raise_if_cancelled()
            action(self._project(item))
        except CancellationError:
            if metrics_enabled:
                status = "cancelled" if token is not None and token.cancelled else "failed"
                PARALLEL_ITEMS_PROCESSED.labels(operation="for_all", status=status).inc()
            raise
        except Exception:
            if metrics_enabled:
                PARALLEL_ITEMS_PROCESSED.labels(operation="for_all", status="failed").inc()
            logger.error("Parallel invocation failed", exc_info=True)
            raise
        else:
            if metrics_enabled:
                PARALLEL_ITEMS_PROCESSED.labels(operation="for_all", status="success").inc()
        finally:
            if metrics_enabled:
                PARALLEL_ACTIVE_WORKERS.dec()


def as_parallel(source: Iterable[T], max_workers: int | None = None) -> ParallelSequence[T]:
    """
    Wrap ``source`` for parallel consumption.

    An existing ``ParallelSequence`` is returned as-is unless ``max_workers``
    is given, in which case it is configured on it.
    """
    if isinstance(source, ParallelSequence):
        if max_workers is None:
            return source
        return source.with_degree_of_parallelism(max_workers)
    return ParallelSequence(source, max_workers=max_workers)
