from __future__ import annotations

from typing import Any

from .constants import MAXIMUM_CAPACITY


def is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def table_size_for(cap: int) -> int:
    """Smallest power of two >= cap, clamped to [1, MAXIMUM_CAPACITY]."""
    if cap <= 1:
        return 1
    if cap >= MAXIMUM_CAPACITY:
        return MAXIMUM_CAPACITY
    return 1 << (cap - 1).bit_length()


def assumption(obj: Any, *expected: type) -> bool:
    """Check against multiple possible types"""
    if isinstance(obj, expected):
        return True
    _raise_assert(obj, expected)
    return False


def _raise_assert(obj: Any, expected: tuple[type, ...]) -> None:
    names = ", ".join(t.__name__ for t in expected)
    if len(expected) == 1:
        msg = f"Expected {names}, instead got {type(obj).__name__} (value: {obj!r})"
    else:
        msg = f"Expected one of ({names}), instead got {type(obj).__name__} (value: {obj!r})"
    raise AssertionError(msg)
