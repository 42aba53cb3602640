"""table.py - HashTable: hash-bucket map with chaining, treeification and resizing

Placement: the spread hash of a key (see ``keys.hash_key``) masked with
``capacity - 1`` selects a slot. Collisions chain in a ``ChainBucket``; a
chain that grows past ``treeify_threshold`` becomes a ``TreeBucket`` when the
table has at least ``min_treeify_capacity`` slots, otherwise the table
doubles instead. After every insertion of a new key the table doubles when
``size > capacity * load_factor``.

Not synchronized. Concurrent mutation from several threads corrupts the
table; callers sharing a table must serialize every operation themselves.
Iterators are fail-fast and raise ConcurrentModificationError once they see
a structural modification made after they started.
"""

from __future__ import annotations

import itertools
import math
import sys
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from .bucket import ChainBucket, Entry, TreeBucket
from .config import TableConfig
from .constants import ABSENT, MAXIMUM_CAPACITY, BucketMode
from .exceptions import ConcurrentModificationError
from .keys import DefaultHasher, Hasher, hash_key
from .logger import get_logger
from .metrics import TableMetrics, TableStats, collect_stats, default_metrics
from .utils import assumption, table_size_for

logger = get_logger(__name__)

Bucket = ChainBucket | TreeBucket


class HashTable:
    """
    HashTable: mapping from key to value over a power-of-two bucket array.

    - ``put``/``get``/``remove``/``contains_key`` run in amortized O(1);
      heavily colliding buckets are trees, bounding them to O(log n).
    - Missing keys are reported with ``ABSENT``; ``None`` is a normal key
      and value.
    - Keys must keep their hash and equality stable while stored. A key
      mutated after insertion leaves the table in an undefined state.
    """

    def __init__(
        self,
        config: TableConfig | None = None,
        *,
        hasher: Hasher | None = None,
        metrics: TableMetrics | None = None,
        **overrides: Any,
    ) -> None:
        if config is None:
            config = TableConfig(**overrides)
        elif overrides:
            config = config.with_overrides(**overrides)
        assert assumption(config, TableConfig)
        self.config = config
        self.hasher: Hasher = hasher if hasher is not None else DefaultHasher()
        assert assumption(self.hasher, Hasher)
        self._metrics = metrics if metrics is not None else default_metrics()

        self._buckets: list[Bucket | None] | None = None
        "Bucket array, allocated on first insertion"
        self._capacity = config.capacity
        self._threshold = self._threshold_for(self._capacity)
        self._size = 0
        self._mod_count = 0
        "Bumped on every structural modification, checked by iterators"
        self._seq = itertools.count()
        "Insertion sequence, the last-resort tree ordering"

    @classmethod
    def from_items(
        cls,
        items: Mapping[Any, Any] | Iterable[tuple[Any, Any]],
        **kwargs: Any,
    ) -> HashTable:
        table = cls(**kwargs)
        table.put_all(items)
        return table

    # --- Sizing ---

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def threshold(self) -> int:
        """Size above which the next insertion doubles the table."""
        return self._threshold

    def _threshold_for(self, capacity: int) -> int:
        if capacity >= MAXIMUM_CAPACITY:
            return sys.maxsize
        return int(capacity * self.config.load_factor)

    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    # --- Lookup ---

    def _get_entry(self, key: Any) -> Entry | None:
        h = hash_key(self.hasher, key)
        if self._buckets is None:
            return None
        bucket = self._buckets[h & (self._capacity - 1)]
        return None if bucket is None else bucket.find(h, key)

    def get(self, key: Any) -> Any:
        """Value stored for ``key``, or ABSENT."""
        e = self._get_entry(key)
        return ABSENT if e is None else e.value

    def get_or_default(self, key: Any, default: Any) -> Any:
        e = self._get_entry(key)
        return default if e is None else e.value

    def contains_key(self, key: Any) -> bool:
        return self._get_entry(key) is not None

    def __contains__(self, key: Any) -> bool:
        return self.contains_key(key)

    def contains_value(self, value: Any) -> bool:
        """Linear scan over all entries."""
        return any(v is value or v == value for v in self.values())

    # --- Insertion ---

    def put(self, key: Any, value: Any) -> Any:
        """Map ``key`` to ``value``; return the previous value or ABSENT."""
        h = hash_key(self.hasher, key)
        return self._put_val(h, key, value, only_if_absent=False)

    def put_if_absent(self, key: Any, value: Any) -> Any:
        """Insert only when ``key`` is missing; return the current value or ABSENT."""
        h = hash_key(self.hasher, key)
        return self._put_val(h, key, value, only_if_absent=True)

    def _put_val(self, h: int, key: Any, value: Any, only_if_absent: bool) -> Any:
        if self._buckets is None:
            self._buckets = [None] * self._capacity
        tab = self._buckets
        i = h & (self._capacity - 1)
        bucket = tab[i]
        seq = next(self._seq)
        if bucket is None:
            tab[i] = ChainBucket(self.hasher, [Entry(key, value, h, seq)])
        else:
            existing = bucket.put(h, key, value, seq)
            if existing is not None:
                old = existing.value
                if not only_if_absent:
                    existing.value = value
                return old
            if (
                bucket.mode is BucketMode.CHAIN
                and len(bucket) > self.config.treeify_threshold
            ):
                self._treeify_bin(i)
        self._mod_count += 1
        self._size += 1
        if self._size > self._threshold:
            self._resize()
        return ABSENT

    def put_all(self, items: Mapping[Any, Any] | Iterable[tuple[Any, Any]]) -> None:
        """Insert every pair from a mapping, a HashTable or an iterable of pairs."""
        if isinstance(items, (HashTable, Mapping)):
            self._presize(len(items))
            pairs = items.items()
        else:
            pairs = items
        for key, value in pairs:
            self.put(key, value)

    def _presize(self, n: int) -> None:
        if n <= 0:
            return
        if self._buckets is None:
            wanted = table_size_for(math.ceil(n / self.config.load_factor))
            if wanted > self._capacity:
                self._capacity = wanted
                self._threshold = self._threshold_for(wanted)
        elif n > self._threshold:
            self._resize()

    def replace(self, key: Any, value: Any) -> Any:
        """Set the value only if ``key`` is present; return the old value or ABSENT."""
        e = self._get_entry(key)
        if e is None:
            return ABSENT
        old = e.value
        e.value = value
        return old

    def compute_if_absent(self, key: Any, fn: Callable[[Any], Any]) -> Any:
        """Return the value for ``key``, computing and storing ``fn(key)`` if
        missing. A result of ABSENT stores nothing.

        ``fn`` must not modify this table.
        """
        e = self._get_entry(key)
        if e is not None:
            return e.value
        mc = self._mod_count
        value = fn(key)
        if self._mod_count != mc:
            raise ConcurrentModificationError(mc, self._mod_count)
        if value is ABSENT:
            return ABSENT
        self.put(key, value)
        return value

    def merge(self, key: Any, value: Any, fn: Callable[[Any, Any], Any]) -> Any:
        """Store ``value`` if ``key`` is missing, else ``fn(old, value)``.

        A merged result of ABSENT removes the key. Returns the new value
        (ABSENT after a removal).
        """
        e = self._get_entry(key)
        if e is None:
            self.put(key, value)
            return value
        mc = self._mod_count
        merged = fn(e.value, value)
        if self._mod_count != mc:
            raise ConcurrentModificationError(mc, self._mod_count)
        if merged is ABSENT:
            self.remove(key)
        else:
            e.value = merged
        return merged

    # --- Removal ---

    def remove(self, key: Any) -> Any:
        """Delete ``key``; return its value or ABSENT."""
        h = hash_key(self.hasher, key)
        if self._buckets is None:
            return ABSENT
        i = h & (self._capacity - 1)
        bucket = self._buckets[i]
        if bucket is None:
            return ABSENT
        removed = bucket.remove(h, key)
        if removed is None:
            return ABSENT
        if (
            bucket.mode is BucketMode.TREE
            and len(bucket) <= self.config.untreeify_threshold
        ):
            self._untreeify_bin(i, bucket)
        elif len(bucket) == 0:
            self._buckets[i] = None
        self._mod_count += 1
        self._size -= 1
        return removed.value

    def clear(self) -> None:
        if self._buckets is not None and self._size > 0:
            self._buckets = [None] * self._capacity
        self._mod_count += 1
        self._size = 0

    # --- Structural changes ---

    def _treeify_bin(self, i: int) -> None:
        """Turn the chain at slot i into a tree, or grow a small table instead."""
        if self._capacity < self.config.min_treeify_capacity:
            logger.debug(
                f"Chain of {len(self._buckets[i])} at slot {i}, capacity "
                f"{self._capacity} < {self.config.min_treeify_capacity}: resizing"
            )
            self._resize()
            return
        chain = self._buckets[i]
        self._buckets[i] = chain.treeify()
        self._metrics.treeifications.inc()
        logger.debug(f"Treeified slot {i} ({len(chain)} entries)")

    def _untreeify_bin(self, i: int, bucket: TreeBucket) -> None:
        chain = bucket.untreeify()
        self._buckets[i] = chain if len(chain) else None
        self._metrics.untreeifications.inc()
        logger.debug(f"Untreeified slot {i} ({len(chain)} entries)")

    def _resize(self) -> None:
        """Double the bucket array, splitting slot j into slots j and j + old capacity."""
        old_cap = self._capacity
        if old_cap >= MAXIMUM_CAPACITY:
            self._threshold = sys.maxsize
            return
        new_cap = old_cap << 1
        old_tab = self._buckets
        new_tab: list[Bucket | None] = [None] * new_cap
        untreeified = 0
        if old_tab is not None:
            for j, bucket in enumerate(old_tab):
                if bucket is None:
                    continue
                lo, hi = bucket.split(old_cap, self.config.untreeify_threshold)
                new_tab[j] = lo
                new_tab[j + old_cap] = hi
                if bucket.mode is BucketMode.TREE:
                    untreeified += sum(
                        1
                        for part in (lo, hi)
                        if part is not None and part.mode is BucketMode.CHAIN
                    )
        self._buckets = new_tab
        self._capacity = new_cap
        self._threshold = self._threshold_for(new_cap)
        self._mod_count += 1
        self._metrics.resizes.inc()
        if untreeified:
            self._metrics.untreeifications.inc(untreeified)
        logger.debug(
            f"Resized {old_cap} -> {new_cap} (size={self._size}, "
            f"threshold={self._threshold}, untreeified={untreeified})"
        )

    # --- Iteration ---

    def _entries(self) -> Iterator[Entry]:
        expected = self._mod_count
        tab = self._buckets
        if tab is None:
            return
        for bucket in tab:
            if bucket is None:
                continue
            for e in bucket:
                if self._mod_count != expected:
                    raise ConcurrentModificationError(expected, self._mod_count)
                yield e
        if self._mod_count != expected:
            raise ConcurrentModificationError(expected, self._mod_count)

    def items(self) -> Iterator[tuple[Any, Any]]:
        """Lazy (key, value) pairs in slot order; the order changes on resize."""
        return ((e.key, e.value) for e in self._entries())

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        return self.items()

    def keys(self) -> Iterator[Any]:
        return (e.key for e in self._entries())

    def values(self) -> Iterator[Any]:
        return (e.value for e in self._entries())

    def for_each(self, action: Callable[[Any, Any], Any]) -> None:
        for key, value in self.items():
            action(key, value)

    # --- Copying and comparison ---

    def copy(self) -> HashTable:
        table = HashTable(self.config, hasher=self.hasher, metrics=self._metrics)
        table.put_all(self)
        return table

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HashTable):
            return NotImplemented
        if self is other:
            return True
        if len(self) != len(other):
            return False
        for key, value in self.items():
            theirs = other.get(key)
            if theirs is ABSENT or not (theirs is value or theirs == value):
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"HashTable({{{inner}}})"

    # --- Introspection ---

    def bucket_at(self, index: int) -> Bucket | None:
        if self._buckets is None:
            return None
        return self._buckets[index]

    def bucket_for(self, key: Any) -> Bucket | None:
        return self.bucket_at(self.index_for(key))

    def index_for(self, key: Any) -> int:
        return hash_key(self.hasher, key) & (self._capacity - 1)

    def bucket_mode(self, key: Any) -> BucketMode | None:
        """Representation of the slot ``key`` maps to, None for an empty slot."""
        bucket = self.bucket_for(key)
        return None if bucket is None else bucket.mode

    def stats(self) -> TableStats:
        return collect_stats(self._capacity, self._size, self._buckets)

    def debug_dump(self) -> str:
        """Return debug information about the table structure."""
        output = [
            f"HashTable debug dump (capacity={self._capacity}, size={self._size}, "
            f"threshold={self._threshold})",
        ]
        if self._buckets is None:
            output.append("  (bucket array not allocated)")
            return "\n".join(output)
        for i, bucket in enumerate(self._buckets):
            if bucket is None:
                continue
            output.append(f"  Slot[{i:04d}] {bucket.mode.name} ({len(bucket)} entries)")
            output.extend(f"    {e.key!r} -> {e.value!r}" for e in bucket)
        return "\n".join(output)
