"""
Thread-safe unordered collection.
"""

import threading
from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class ConcurrentBag(Generic[T]):
    """
    Unordered multiset safe for concurrent ``add`` from many threads.

    No ordering guarantee: ``try_take`` and iteration may return items in any
    order. Duplicates are kept. Iteration walks a snapshot, so the bag may be
    modified while it is being iterated.
    """

    def __init__(self, items: Iterable[T] = ()):
        self._lock = threading.Lock()
        self._items: list[T] = list(items)

    def add(self, item: T) -> None:
        with self._lock:
            self._items.append(item)

    def try_take(self) -> tuple[bool, T | None]:
        """Remove and return some item, or ``(False, None)`` when empty."""
        with self._lock:
            if not self._items:
                return False, None
            return True, self._items.pop()

    def try_peek(self) -> tuple[bool, T | None]:
        """Return the item ``try_take`` would remove, without removing it."""
        with self._lock:
            if not self._items:
                return False, None
            return True, self._items[-1]

    def to_list(self) -> list[T]:
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.to_list())

    def __contains__(self, item: object) -> bool:
        with self._lock:
            return item in self._items

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_list()!r})"
