"""bucket.py - Chain and tree bucket representations for HashTable slots.

A slot of the table's bucket array holds ``None`` or one of:

- ``ChainBucket``: entries in insertion order, linear scan on lookup;
- ``TreeBucket``: entries as nodes of a red-black tree, O(log n) lookup.

Both expose the same surface (``find``, ``put``, ``remove``, ``split``,
``len``, iteration over entries) so the table only switches on ``mode`` to
decide when to treeify or untreeify.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from .constants import BucketMode
from .keys import Hasher, key_order
from .rbtree import RedBlackTree, TreeNode


class Entry:
    """A stored mapping: key, value, cached spread hash and insertion sequence."""

    __slots__ = ("key", "value", "hash", "seq")

    def __init__(self, key: Any, value: Any, hash_: int, seq: int) -> None:
        self.key = key
        self.value = value
        self.hash = hash_
        self.seq = seq

    def __repr__(self) -> str:
        return f"Entry({self.key!r}={self.value!r}, hash={self.hash:#x})"


class ChainBucket:
    mode = BucketMode.CHAIN

    __slots__ = ("entries", "hasher", "_equals")

    def __init__(self, hasher: Hasher, entries: list[Entry] | None = None) -> None:
        self.hasher = hasher
        self._equals = hasher.equals
        self.entries: list[Entry] = entries if entries is not None else []

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def find(self, h: int, key: Any) -> Entry | None:
        equals = self._equals
        for e in self.entries:
            if e.hash == h and (e.key is key or equals(key, e.key)):
                return e
        return None

    def put(self, h: int, key: Any, value: Any, seq: int) -> Entry | None:
        """Append a new entry unless the key is present; return the existing
        entry in that case, None when appended."""
        existing = self.find(h, key)
        if existing is not None:
            return existing
        self.entries.append(Entry(key, value, h, seq))
        return None

    def remove(self, h: int, key: Any) -> Entry | None:
        equals = self._equals
        for i, e in enumerate(self.entries):
            if e.hash == h and (e.key is key or equals(key, e.key)):
                del self.entries[i]
                return e
        return None

    def split(
        self, bit: int, untreeify_threshold: int
    ) -> tuple[ChainBucket | None, ChainBucket | None]:
        """Partition on ``hash & bit`` into the buckets for index j and j + bit."""
        lo: list[Entry] = []
        hi: list[Entry] = []
        for e in self.entries:
            (hi if e.hash & bit else lo).append(e)
        return (
            ChainBucket(self.hasher, lo) if lo else None,
            ChainBucket(self.hasher, hi) if hi else None,
        )

    def treeify(self) -> TreeBucket:
        tree = TreeBucket(self.hasher)
        for e in self.entries:
            tree.tree.insert(TreeNode(e.key, e.value, e.hash, e.seq))
        return tree

    def __repr__(self) -> str:
        return f"ChainBucket({self.entries!r})"


class TreeBucket:
    mode = BucketMode.TREE

    __slots__ = ("tree", "hasher")

    def __init__(self, hasher: Hasher) -> None:
        self.hasher = hasher
        self.tree = RedBlackTree(hasher.equals, key_order(hasher))

    @classmethod
    def from_nodes(cls, hasher: Hasher, nodes: list[TreeNode]) -> TreeBucket:
        bucket = cls(hasher)
        for node in nodes:
            bucket.tree.insert(node)
        return bucket

    def __len__(self) -> int:
        return len(self.tree)

    def __iter__(self) -> Iterator[TreeNode]:
        return iter(self.tree)

    def find(self, h: int, key: Any) -> TreeNode | None:
        return self.tree.find(h, key)

    def put(self, h: int, key: Any, value: Any, seq: int) -> TreeNode | None:
        """Insert a new node unless the key is present; return the existing
        node in that case, None when inserted."""
        existing = self.tree.find(h, key)
        if existing is not None:
            return existing
        self.tree.insert(TreeNode(key, value, h, seq))
        return None

    def remove(self, h: int, key: Any) -> Entry | None:
        node = self.tree.find(h, key)
        if node is None:
            return None
        # Removal may move a successor's payload into this node; snapshot first.
        removed = Entry(node.key, node.value, node.hash, node.seq)
        self.tree.remove(node)
        return removed

    def untreeify(self) -> ChainBucket:
        return ChainBucket(
            self.hasher,
            sorted(
                (Entry(n.key, n.value, n.hash, n.seq) for n in self.tree),
                key=lambda e: e.seq,
            ),
        )

    def split(
        self, bit: int, untreeify_threshold: int
    ) -> tuple[ChainBucket | TreeBucket | None, ChainBucket | TreeBucket | None]:
        """Partition on ``hash & bit``; halves at or below the untreeify
        threshold become chains, an empty half leaves the tree intact."""
        lo: list[TreeNode] = []
        hi: list[TreeNode] = []
        for node in self.tree:
            (hi if node.hash & bit else lo).append(node)
        if not hi and len(lo) > untreeify_threshold:
            return self, None
        if not lo and len(hi) > untreeify_threshold:
            return None, self
        return self._rebuild(lo, untreeify_threshold), self._rebuild(
            hi, untreeify_threshold
        )

    def _rebuild(
        self, nodes: list[TreeNode], untreeify_threshold: int
    ) -> ChainBucket | TreeBucket | None:
        if not nodes:
            return None
        if len(nodes) <= untreeify_threshold:
            nodes.sort(key=lambda n: n.seq)
            return ChainBucket(
                self.hasher, [Entry(n.key, n.value, n.hash, n.seq) for n in nodes]
            )
        for node in nodes:
            node.left = node.right = node.parent = None
        return TreeBucket.from_nodes(self.hasher, nodes)

    def __repr__(self) -> str:
        return f"TreeBucket(size={len(self.tree)}, height={self.tree.height()})"
