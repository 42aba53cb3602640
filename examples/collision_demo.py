"""Show a bucket turning into a tree under deliberate hash collisions.

Run with:
    python examples/collision_demo.py
"""

import logging

from treehash.constants import ABSENT
from treehash.table import HashTable


class SameHash:
    """Every instance hashes to 42."""

    def __init__(self, name):
        self.name = name

    def __hash__(self):
        return 42

    def __eq__(self, other):
        return isinstance(other, SameHash) and self.name == other.name

    def __lt__(self, other):
        return self.name < other.name

    def __repr__(self):
        return f"SameHash({self.name!r})"


def main():
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    table = HashTable(initial_capacity=64)
    for i in range(12):
        table.put(SameHash(f"Key{i}"), i)
        print(f"{i + 1:2d} keys -> {table.bucket_mode(SameHash('Key0')).name}")

    print(table.stats())
    for i in range(12):
        assert table.get(SameHash(f"Key{i}")) == i
    assert table.get(SameHash("missing")) is ABSENT

    for i in range(11, 5, -1):
        table.remove(SameHash(f"Key{i}"))
    print(f"after removals -> {table.bucket_mode(SameHash('Key0')).name}")
    print(table.debug_dump())


if __name__ == "__main__":
    main()
