"""keys.py: Key hashing, spreading and tree ordering"""

from __future__ import annotations

import numbers
from collections.abc import Callable
from collections.abc import Set as AbstractSet
from typing import Any, Final, Protocol, runtime_checkable

from .constants import HASH_BITS, HASH_MASK, NONE_KEY_HASH
from .exceptions import InvalidKeyError

MASK64: Final[int] = 0xFFFFFFFFFFFFFFFF
SPREAD_SHIFT: Final[int] = 16


@runtime_checkable
class Hasher(Protocol):
    """Capabilities a table needs from its keys.

    ``hash`` must be stable for the lifetime of the entry and consistent with
    ``equals``: equal keys produce equal hashes.

    A hasher may also define ``compare(a, b) -> int`` to order colliding keys
    inside tree buckets. It must be a consistent ordering that agrees with
    ``equals``: keys that are equal compare the same way against every other
    key. Without it, tree lookups on a hash tie search both subtrees.
    """

    def hash(self, key: Any) -> int: ...

    def equals(self, a: Any, b: Any) -> bool: ...


class DefaultHasher:
    """Uses the keys' own ``__hash__`` / ``__eq__``."""

    __slots__ = ()

    def hash(self, key: Any) -> int:
        return hash(key)

    def equals(self, a: Any, b: Any) -> bool:
        return a is b or a == b

    def compare(self, a: Any, b: Any) -> int:
        return natural_compare(a, b)

    def __repr__(self) -> str:
        return "DefaultHasher()"


class MixingHasher:
    """Wraps another hasher and runs its hash codes through ``enhanced_mix``.

    Useful for key types whose hash codes differ only in bits above the ones
    used for indexing (e.g. multiples of a large power of two).
    """

    __slots__ = ("inner",)

    def __init__(self, inner: Hasher | None = None) -> None:
        self.inner = inner if inner is not None else DefaultHasher()

    def hash(self, key: Any) -> int:
        return enhanced_mix(self.inner.hash(key) & MASK64)

    def equals(self, a: Any, b: Any) -> bool:
        return self.inner.equals(a, b)

    def compare(self, a: Any, b: Any) -> int:
        order = key_order(self.inner)
        return 0 if order is None else order(a, b)

    def __repr__(self) -> str:
        return f"MixingHasher({self.inner!r})"


def key_order(hasher: Hasher) -> Callable[[Any, Any], int] | None:
    """The hasher's ``compare``, or None when it has none."""
    return getattr(hasher, "compare", None)


def enhanced_mix(x: int) -> int:
    """
    Mixes the bits of x using a series of shifts and multiplications.

    Fixed right shift of 33 bits with two odd 64-bit multipliers, the
    MurmurHash3 finalizer shape. Returns a 64-bit integer in which every
    input bit affects every output bit.
    """
    fixed_r = 33
    x ^= x >> fixed_r
    x = (x * 0x8F3E1036504F61E3) & MASK64
    x ^= x >> fixed_r
    x = (x * 0xB7C835C4D183EB31) & MASK64
    x ^= x >> fixed_r
    return x


def fold_hash(h: int) -> int:
    """Reduce an arbitrary Python int hash code to 32 bits, XOR-folding the
    upper words in so that no bits are simply discarded.

    Negative codes are taken as 64-bit two's complement.
    """
    if h < 0:
        h &= MASK64
    while h > HASH_MASK:
        h = (h & HASH_MASK) ^ (h >> HASH_BITS)
    return h


def spread_hash(h: int) -> int:
    """XOR the high 16 bits of a 32-bit hash into the low 16 bits.

    Indexing only looks at the low bits (``hash & (capacity - 1)``), so keys
    whose hash codes vary only in the upper half would otherwise pile into
    the same bucket.
    """
    return h ^ (h >> SPREAD_SHIFT)


def hash_key(hasher: Hasher, key: Any) -> int:
    """Spread hash of ``key`` under ``hasher``; ``None`` always hashes to 0.

    Raises InvalidKeyError when the hasher cannot produce an int for the key.
    """
    if key is None:
        return NONE_KEY_HASH
    try:
        raw = hasher.hash(key)
    except TypeError as e:
        raise InvalidKeyError(key, str(e)) from e
    if not isinstance(raw, int):
        raise InvalidKeyError(
            key, f"hash code must be an int, got {type(raw).__name__}"
        )
    return spread_hash(fold_hash(raw))


_NONE: Final = ("none",)
_NAN: Final = ("nan",)
_NUMBER: Final = ("number",)
_COMPLEX: Final = ("complex",)
_STR: Final = ("str",)
_BYTES: Final = ("bytes",)
_TUPLE: Final = ("tuple",)
_SET: Final = ("set",)


def _order_key(key: Any) -> tuple[tuple[str, ...], Any]:
    """(family, value) of a key for ``natural_compare``.

    Keys that compare equal with ``==`` must land in the same family, so
    numbers of every type share one, as do str and tuple subclasses.
    """
    if key is None:
        return _NONE, None
    if isinstance(key, numbers.Number):
        if key != key:
            return _NAN, None
        if isinstance(key, numbers.Complex) and not isinstance(key, numbers.Real):
            if key.imag:
                return _COMPLEX, (key.real, key.imag)
            key = key.real
        return _NUMBER, key
    if isinstance(key, str):
        return _STR, key
    if isinstance(key, bytes):
        return _BYTES, key
    if isinstance(key, tuple):
        return _TUPLE, key
    if isinstance(key, AbstractSet):
        return _SET, None
    t = type(key)
    return ("type", t.__module__, t.__qualname__), key


def _sign(a: Any, b: Any) -> int:
    try:
        if a < b:
            return -1
        if b < a:
            return 1
    except TypeError:
        pass
    return 0


def natural_compare(a: Any, b: Any) -> int:
    """Order two keys for tree placement, consistently with ``==``.

    Keys of different families order by family name. Within a family, numbers,
    strings and bytes order by value and tuples element by element. Keys of a
    single user type order by their own ``<``, which must then be a strict
    weak order agreeing with ``==`` (the same contract ``sorted`` relies on).
    NaNs, sets and keys whose ``<`` raises TypeError are left unordered.

    Returns negative, zero or positive. Zero means no order: the tree falls
    back to insertion sequence and lookups search both subtrees.
    """
    fa, va = _order_key(a)
    fb, vb = _order_key(b)
    if fa != fb:
        return -1 if fa < fb else 1
    if fa is _TUPLE:
        for x, y in zip(va, vb):
            c = natural_compare(x, y)
            if c:
                return c
        return _sign(len(va), len(vb))
    if va is None:
        return 0
    return _sign(va, vb)
