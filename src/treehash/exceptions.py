"""exceptions.py - Exception hierarchy for treehash tables.

Defines exceptions for:
- Keys whose hash/equality contract cannot be used
- Structural modification detected during iteration
- Invalid table configuration

Absence of a key is never an exception; lookups return ``ABSENT``.
"""

from __future__ import annotations

from typing import Any


class TreeHashError(Exception):
    """Base exception for all treehash errors."""

    pass


class InvalidKeyError(TreeHashError, TypeError):
    """Raised when a key cannot produce a usable hash code.

    Examples:
        - Unhashable key type (list, dict, set)
        - Custom hasher raising TypeError for the key
        - Custom hasher returning something other than an int
    """

    def __init__(self, key: Any, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid key {key!r}: {reason}")


class ConcurrentModificationError(TreeHashError, RuntimeError):
    """Raised by an iterator when the table was structurally modified after
    the iterator was created.

    Structural modifications are insertions of new keys, removals, clear()
    and resizes. Replacing the value of an existing key is not one.
    """

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Table modified during iteration (mod count {expected} -> {actual})"
        )


class TableConfigError(TreeHashError, ValueError):
    """Raised when a TableConfig field is out of range."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}={value!r}: {reason}")
