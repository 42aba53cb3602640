"""rbtree.py - Red-black tree used by treeified buckets.

Nodes are ordered by (hash, key order, insertion sequence):

- smaller spread hash sorts left;
- for equal hashes, the ``compare`` function handed in by the bucket
  decides (usually the hasher's ``compare``);
- keys it leaves unordered fall back to insertion sequence (``seq``), so a
  later insertion sorts right.

This is a total order, so rotations never move a key to the wrong side of a
node. Lookups cannot use ``seq`` (the probe key has none), so on a hash tie
that ``compare`` does not decide ``find`` searches the right subtree and then
continues left. Without a ``compare`` every hash tie is searched that way.

Invariants (see ``check_invariants``):
- the root is black;
- no red node has a red child;
- every root-to-leaf path crosses the same number of black nodes;
- in-order traversal is strictly increasing in (hash, key order, seq).
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

Compare = Callable[[Any, Any], int]


class TreeNode:
    __slots__ = ("key", "value", "hash", "seq", "left", "right", "parent", "red")

    def __init__(self, key: Any, value: Any, hash_: int, seq: int) -> None:
        self.key = key
        self.value = value
        self.hash = hash_
        self.seq = seq
        self.left: TreeNode | None = None
        self.right: TreeNode | None = None
        self.parent: TreeNode | None = None
        self.red = True

    def __repr__(self) -> str:
        color = "R" if self.red else "B"
        return f"TreeNode({self.key!r}={self.value!r}, hash={self.hash:#x}, {color})"


def _is_red(node: TreeNode | None) -> bool:
    return node is not None and node.red


class RedBlackTree:
    """Self-balancing BST of TreeNodes; O(log n) insert, find and remove."""

    def __init__(
        self, equals: Callable[[Any, Any], bool], compare: Compare | None = None
    ) -> None:
        self.root: TreeNode | None = None
        self._size = 0
        self._equals = equals
        self._compare = compare

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[TreeNode]:
        """In-order traversal."""
        stack: list[TreeNode] = []
        node = self.root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node
            node = node.right

    # --- Ordering ---

    def _key_order(self, a: Any, b: Any) -> int:
        return 0 if self._compare is None else self._compare(a, b)

    def _direction(self, h: int, key: Any, seq: int, node: TreeNode) -> int:
        """-1 if (h, key, seq) sorts left of node, else 1."""
        if h != node.hash:
            return -1 if h < node.hash else 1
        c = self._key_order(key, node.key)
        if c:
            return -1 if c < 0 else 1
        return -1 if seq < node.seq else 1

    # --- Search ---

    def find(self, h: int, key: Any) -> TreeNode | None:
        return self._find(self.root, h, key)

    def _find(self, p: TreeNode | None, h: int, key: Any) -> TreeNode | None:
        while p is not None:
            if h < p.hash:
                p = p.left
            elif h > p.hash:
                p = p.right
            elif p.key is key or self._equals(key, p.key):
                return p
            else:
                c = self._key_order(key, p.key)
                if c:
                    p = p.left if c < 0 else p.right
                else:
                    q = self._find(p.right, h, key)
                    if q is not None:
                        return q
                    p = p.left
        return None

    # --- Insertion ---

    def insert(self, node: TreeNode) -> TreeNode:
        """Link ``node`` into the tree and rebalance.

        The caller guarantees no equal key is present (``find`` first).
        """
        parent: TreeNode | None = None
        p = self.root
        d = 0
        while p is not None:
            parent = p
            d = self._direction(node.hash, node.key, node.seq, p)
            p = p.left if d < 0 else p.right

        node.parent = parent
        node.left = node.right = None
        node.red = True
        if parent is None:
            self.root = node
        elif d < 0:
            parent.left = node
        else:
            parent.right = node
        self._size += 1
        self._insert_fixup(node)
        return node

    def _insert_fixup(self, z: TreeNode) -> None:
        while z.parent is not None and z.parent.red:
            p = z.parent
            g = p.parent
            # A red parent is never the root, so g exists
            if p is g.left:
                u = g.right
                if _is_red(u):
                    p.red = False
                    u.red = False
                    g.red = True
                    z = g
                else:
                    if z is p.right:
                        z = p
                        self._rotate_left(z)
                        p = z.parent
                    p.red = False
                    g.red = True
                    self._rotate_right(g)
            else:
                u = g.left
                if _is_red(u):
                    p.red = False
                    u.red = False
                    g.red = True
                    z = g
                else:
                    if z is p.left:
                        z = p
                        self._rotate_right(z)
                        p = z.parent
                    p.red = False
                    g.red = True
                    self._rotate_left(g)
        self.root.red = False

    # --- Removal ---

    def remove(self, z: TreeNode) -> None:
        """Unlink ``z`` (a node of this tree) and rebalance.

        A node with two children takes over its in-order successor's payload
        and the successor's node is unlinked instead.
        """
        if z.left is not None and z.right is not None:
            s = z.right
            while s.left is not None:
                s = s.left
            z.key, z.value, z.hash, z.seq = s.key, s.value, s.hash, s.seq
            z = s

        child = z.left if z.left is not None else z.right
        parent = z.parent
        if child is not None:
            child.parent = parent
        if parent is None:
            self.root = child
        elif z is parent.left:
            parent.left = child
        else:
            parent.right = child

        if not z.red:
            self._remove_fixup(child, parent)
        self._size -= 1
        z.left = z.right = z.parent = None

    def _remove_fixup(self, x: TreeNode | None, parent: TreeNode | None) -> None:
        while x is not self.root and not _is_red(x):
            if x is parent.left:
                w = parent.right
                if w.red:
                    w.red = False
                    parent.red = True
                    self._rotate_left(parent)
                    w = parent.right
                if not _is_red(w.left) and not _is_red(w.right):
                    w.red = True
                    x = parent
                    parent = x.parent
                else:
                    if not _is_red(w.right):
                        w.left.red = False
                        w.red = True
                        self._rotate_right(w)
                        w = parent.right
                    w.red = parent.red
                    parent.red = False
                    if w.right is not None:
                        w.right.red = False
                    self._rotate_left(parent)
                    x = self.root
                    parent = None
            else:
                w = parent.left
                if w.red:
                    w.red = False
                    parent.red = True
                    self._rotate_right(parent)
                    w = parent.left
                if not _is_red(w.left) and not _is_red(w.right):
                    w.red = True
                    x = parent
                    parent = x.parent
                else:
                    if not _is_red(w.left):
                        w.right.red = False
                        w.red = True
                        self._rotate_left(w)
                        w = parent.left
                    w.red = parent.red
                    parent.red = False
                    if w.left is not None:
                        w.left.red = False
                    self._rotate_right(parent)
                    x = self.root
                    parent = None
        if x is not None:
            x.red = False

    # --- Rotations ---

    def _rotate_left(self, x: TreeNode) -> None:
        y = x.right
        x.right = y.left
        if y.left is not None:
            y.left.parent = x
        y.parent = x.parent
        if x.parent is None:
            self.root = y
        elif x is x.parent.left:
            x.parent.left = y
        else:
            x.parent.right = y
        y.left = x
        x.parent = y

    def _rotate_right(self, x: TreeNode) -> None:
        y = x.left
        x.left = y.right
        if y.right is not None:
            y.right.parent = x
        y.parent = x.parent
        if x.parent is None:
            self.root = y
        elif x is x.parent.right:
            x.parent.right = y
        else:
            x.parent.left = y
        y.right = x
        x.parent = y

    # --- Introspection ---

    def height(self) -> int:
        """Longest root-to-leaf path in nodes (0 for an empty tree)."""

        def _height(node: TreeNode | None) -> int:
            if node is None:
                return 0
            return 1 + max(_height(node.left), _height(node.right))

        return _height(self.root)

    def black_height(self) -> int:
        """Black nodes on the leftmost root-to-leaf path."""
        count = 0
        node = self.root
        while node is not None:
            if not node.red:
                count += 1
            node = node.left
        return count

    def check_invariants(self) -> bool:
        if self.root is None:
            return self._size == 0
        if self.root.red or self.root.parent is not None:
            return False
        if self._check_subtree(self.root) < 0:
            return False
        count = 0
        prev: TreeNode | None = None
        for node in self:
            if prev is not None and self._direction(
                node.hash, node.key, node.seq, prev
            ) < 0:
                return False
            prev = node
            count += 1
        return count == self._size

    def _check_subtree(self, node: TreeNode | None) -> int:
        """Black height of the subtree, or -1 on any violation."""
        if node is None:
            return 1
        if node.red and (_is_red(node.left) or _is_red(node.right)):
            return -1
        for child in (node.left, node.right):
            if child is not None and child.parent is not node:
                return -1
        lh = self._check_subtree(node.left)
        rh = self._check_subtree(node.right)
        if lh < 0 or rh < 0 or lh != rh:
            return -1
        return lh + (0 if node.red else 1)
