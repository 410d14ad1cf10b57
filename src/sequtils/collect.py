"""
Lazy collectors over iterables.

``collect_present`` drops ``None``; ``collect_mapped`` keeps the outputs of a
try-operation that reported success:

    >>> list(collect_present([1, None, 2]))
    [1, 2]
    >>> list(collect_mapped(["5", None, "x", "3"], try_parse_int))
    [5, 3]
"""

from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

T = TypeVar("T")
TIn = TypeVar("TIn")
TOut = TypeVar("TOut")

# Returns (True, value) with value not None on success, (False, _) otherwise
TryFunc = Callable[[TIn], tuple[bool, TOut | None]]


def collect_present(source: Iterable[T | None]) -> Iterator[T]:
    """
    Yield the elements of ``source`` that are not ``None``, in order.

    Only ``None`` counts as absent; ``0``, ``""`` and ``False`` are kept.
    """
    for item in source:
        if item is not None:
            yield item


def collect_mapped(
    source: Iterable[TIn],
    try_func: TryFunc[TIn, TOut],
) -> Iterator[TOut]:
    """
    Yield ``out`` for every element where ``try_func(element)`` returns
    ``(True, out)``, in source order.

    ``try_func`` is trusted to return a present value whenever it reports
    success; nothing here checks that.
    """
    for item in source:
        ok, out = try_func(item)
        if ok:
            yield out


def as_try_func(
    func: Callable[[TIn], TOut],
    exceptions: tuple[type[BaseException], ...] = (ValueError, TypeError),
) -> TryFunc[TIn, TOut]:
    """
    Adapt a raising conversion into a try-operation.

    ``func(x)`` returning normally is success; raising one of ``exceptions``
    is failure. Any other exception propagates.

        >>> try_float = as_try_func(float)
        >>> try_float("1.5"), try_float("n/a")
        ((True, 1.5), (False, None))
    """
    def try_func(item: TIn) -> tuple[bool, TOut | None]:
        try:
            return True, func(item)
        except exceptions:
            return False, None

    try_func.__name__ = f"try_{getattr(func, '__name__', 'func')}"
    try_func.__doc__ = f"Try-operation wrapping {func!r}."
    return try_func


def try_parse_int(value: Any) -> tuple[bool, int | None]:
    """``int(value)``, reporting failure for ``None`` and unparsable input."""
    try:
        return True, int(value)
    except (ValueError, TypeError):
        return False, None
