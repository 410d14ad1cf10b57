"""
Cooperative cancellation.

A ``CancellationToken`` is shared between whoever requests cancellation and
the work that should stop. Dispatch loops check it before launching each
element; long-running operations are expected to check it (or sleep through
``token.sleep``) themselves. Nothing is ever interrupted forcibly.
"""

import asyncio
import threading

from .exceptions import CancellationError

__all__ = ["CancellationError", "CancellationToken"]


def _wake(waiter: asyncio.Future) -> None:
    if not waiter.done():
        waiter.set_result(None)


class CancellationToken:
    """
    Thread-safe, one-way cancellation flag.

    ``cancel`` may be called from any thread. Threads blocked in ``wait`` and
    coroutines suspended in ``sleep`` (on any event loop) are woken at once.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        # Futures of suspended sleep() calls, each with the loop that owns it
        self._waiters: dict[asyncio.Future, asyncio.AbstractEventLoop] = {}

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            waiters, self._waiters = self._waiters, {}

        for waiter, loop in waiters.items():
            try:
                loop.call_soon_threadsafe(_wake, waiter)
            except RuntimeError:
                # Loop already closed; nothing is left awaiting this future
                continue

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationError("Operation was cancelled")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return ``cancelled``."""
        return self._event.wait(timeout)

    async def sleep(self, delay: float) -> None:
        """
        Sleep for ``delay`` seconds unless cancelled first.

        The sleep suspends on the running event loop without occupying a
        thread, so any number of operations can sleep on one token at once.

        Raises:
            CancellationError: if the token is (or becomes) cancelled before
                the delay elapses
        """
        self.raise_if_cancelled()
        if delay <= 0:
            return

        loop = asyncio.get_running_loop()
        waiter = loop.create_future()
        with self._lock:
            if self._event.is_set():
                raise CancellationError("Operation was cancelled")
            self._waiters[waiter] = loop

        try:
            await asyncio.wait({waiter}, timeout=delay)
        finally:
            with self._lock:
                self._waiters.pop(waiter, None)
            if not waiter.done():
                waiter.cancel()

        if not waiter.cancelled():
            raise CancellationError("Operation was cancelled")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
