"""constants.py - Default thresholds, enums and sentinels for treehash."""

from __future__ import annotations

from enum import Enum
from typing import Final

# Table sizing
DEFAULT_INITIAL_CAPACITY: Final[int] = 16
DEFAULT_LOAD_FACTOR: Final[float] = 0.75
MAXIMUM_CAPACITY: Final[int] = 1 << 30

# Bucket representation thresholds
TREEIFY_THRESHOLD: Final[int] = 8
UNTREEIFY_THRESHOLD: Final[int] = 6
MIN_TREEIFY_CAPACITY: Final[int] = 64

# Spread hashes are folded to 32 bits; capacity never exceeds 2**30.
HASH_BITS: Final[int] = 32
HASH_MASK: Final[int] = (1 << HASH_BITS) - 1
NONE_KEY_HASH: Final[int] = 0


class BucketMode(Enum):
    CHAIN = 1
    TREE = 2


class _Absent:
    """Marker returned in place of a value when a key is not present.

    Distinct from ``None`` so that ``None`` stays an ordinary storable value.
    """

    __slots__ = ()
    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Absent, ())


ABSENT: Final[_Absent] = _Absent()
"Returned by lookups and removals when the key is not present"
