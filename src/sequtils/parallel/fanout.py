"""
Asynchronous fan-out over a parallel sequence.

Each ``for_all_async*`` coroutine calls the per-element function from worker
threads (so launching is itself parallel), schedules every returned awaitable
on the caller's event loop, collects the handles in a ``ConcurrentBag`` and
then waits for all of them:

    async def fetch(url):
        ...

    await for_all_async(as_parallel(urls, max_workers=4), fetch)

Join semantics follow "wait for all": the coroutine returns only after every
launched operation has finished. If any failed, an ``ExceptionGroup`` of all
failures is raised; otherwise, if any was cancelled, ``asyncio.CancelledError``
is raised.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Iterable
from concurrent.futures import Future
from contextlib import nullcontext
from typing import Any, TypeVar

from sequtils.cancellation import CancellationToken
from sequtils.config import get_settings
from sequtils.utils.logging import get_logger
from sequtils.utils.tracing import add_span_event, trace_operation

from .foreach import parallel_to_bag
from .metrics import PARALLEL_DISPATCH_TIME, PARALLEL_ITEMS_PROCESSED
from .query import ParallelSequence, as_parallel

logger = get_logger(__name__, component="fanout")

T = TypeVar("T")
S = TypeVar("S")


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def _launcher(
    func: Callable[[T], Awaitable[Any]],
    loop: asyncio.AbstractEventLoop,
) -> Callable[[T], Future]:
    """Wrap ``func`` so that calling it on a worker thread starts the
    returned awaitable on ``loop`` and hands back a thread-safe future."""
    def launch(item: T) -> Future:
        awaitable = func(item)
        if not inspect.isawaitable(awaitable):
            raise TypeError(
                f"Expected an awaitable from {func!r}, got {type(awaitable).__name__}"
            )
        return asyncio.run_coroutine_threadsafe(_await(awaitable), loop)

    return launch


async def _when_all(futures: list[Future], metrics_enabled: bool) -> None:
    if not futures:
        return

    results = await asyncio.gather(
        *(asyncio.wrap_future(future) for future in futures),
        return_exceptions=True,
    )

    errors = [
        result for result in results
        if isinstance(result, BaseException) and not isinstance(result, asyncio.CancelledError)
    ]
    cancelled = sum(isinstance(result, asyncio.CancelledError) for result in results)

    if metrics_enabled:
        counter = PARALLEL_ITEMS_PROCESSED.labels
        counter(operation="for_all_async", status="success").inc(len(results) - len(errors) - cancelled)
        counter(operation="for_all_async", status="failed").inc(len(errors))
        counter(operation="for_all_async", status="cancelled").inc(cancelled)

    if errors:
        logger.error(
            f"{len(errors)} of {len(results)} asynchronous operation(s) failed",
            failed=len(errors),
            total=len(results),
        )
        raise BaseExceptionGroup(
            f"{len(errors)} asynchronous operation(s) failed", errors
        )

    if cancelled:
        logger.warning(
            f"{cancelled} of {len(results)} asynchronous operation(s) were cancelled",
            cancelled=cancelled,
        )
        raise asyncio.CancelledError()


async def _fan_out(
    source: ParallelSequence[Any],
    launch: Callable[[Any], Future],
    operation: str,
) -> None:
    settings = get_settings()
    span = (
        trace_operation(operation, max_workers=source.max_workers)
        if settings.tracing_enabled
        else nullcontext()
    )

    with span:
        start = time.perf_counter()

        bag = await asyncio.to_thread(parallel_to_bag, source.select(launch))
        futures = bag.to_list()

        add_span_event("dispatch_completed", launched=len(futures))
        logger.debug(f"Launched {len(futures)} asynchronous operation(s)", operation=operation)

        try:
            await _when_all(futures, settings.metrics_enabled)
        finally:
            if settings.metrics_enabled:
                PARALLEL_DISPATCH_TIME.labels(operation="for_all_async").observe(
                    time.perf_counter() - start
                )


async def for_all_async(
    source: Iterable[T],
    func: Callable[[T], Awaitable[Any]],
) -> None:
    """
    Run ``func`` on each element of ``source`` and wait for all of the
    resulting operations to complete.

    Args:
        source: A ``ParallelSequence`` (its configuration is respected) or any
            iterable
        func: Called once per element, on a worker thread; must return an
            awaitable (typically a coroutine)

    Raises:
        ExceptionGroup: launching or running one or more operations failed
        asyncio.CancelledError: an operation was cancelled and none failed
    """
    loop = asyncio.get_running_loop()
    await _fan_out(
        as_parallel(source),
        _launcher(func, loop),
        "sequtils.for_all_async",
    )


async def for_all_async_with_state(
    source: Iterable[T],
    func: Callable[[T, S], Awaitable[Any]],
    state: S,
) -> None:
    """
    Like ``for_all_async``, passing the same ``state`` object to every call
    as ``func(item, state)``.

    ``state`` is forwarded as-is; if operations mutate it they must
    synchronise themselves.
    """
    loop = asyncio.get_running_loop()
    await _fan_out(
        as_parallel(source),
        _launcher(lambda item: func(item, state), loop),
        "sequtils.for_all_async_with_state",
    )


async def for_all_async_with_cancellation(
    source: Iterable[T],
    func: Callable[[T, CancellationToken], Awaitable[Any]],
    cancellation_token: CancellationToken | None = None,
) -> None:
    """
    Like ``for_all_async``, passing ``cancellation_token`` to every call as
    ``func(item, token)``.

    The token is checked before each element is launched. Once it is
    cancelled no further operations start and ``CancellationError`` is raised
    straight away: operations already running are neither awaited nor
    aborted, so ``func`` must observe the token itself to stop early (for
    instance by sleeping through ``token.sleep``).

    This installs the token on ``source`` with ``with_cancellation``, so a
    ``ParallelSequence`` that already carries a token is rejected with
    ``ConfigurationError``.

    Raises:
        CancellationError: the token was cancelled during dispatch
        ExceptionGroup: launching or running one or more operations failed
        asyncio.CancelledError: an operation was cancelled and none failed
    """
    token = cancellation_token if cancellation_token is not None else CancellationToken()
    loop = asyncio.get_running_loop()
    await _fan_out(
        as_parallel(source).with_cancellation(token),
        _launcher(lambda item: func(item, token), loop),
        "sequtils.for_all_async_with_cancellation",
    )
