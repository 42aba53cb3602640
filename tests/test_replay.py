# Replaying the same put/remove sequence must give the same contents
# regardless of initial capacity, and match a plain dict.

import random
import sys
from decimal import Decimal
from fractions import Fraction

import pytest

from treehash.constants import ABSENT, BucketMode


def random_ops(seed, n, key_space):
    rng = random.Random(seed)
    ops = []
    for _ in range(n):
        key = rng.choice(key_space)
        if rng.random() < 0.65:
            ops.append(("put", key, rng.randrange(1000)))
        else:
            ops.append(("remove", key, None))
    return ops


def replay(table, ops, reference=None):
    for op, key, value in ops:
        if op == "put":
            previous = table.put(key, value)
            if reference is not None:
                assert previous == reference.get(key, ABSENT)
                reference[key] = value
        else:
            previous = table.remove(key)
            if reference is not None:
                if key in reference:
                    assert previous == reference.pop(key)
                else:
                    assert previous is ABSENT
        if reference is not None:
            assert table.size() == len(reference)
    return table


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_matches_dict(make_table, seed):
    keys = [f"k{i}" for i in range(400)] + list(range(400)) + [None]
    ops = random_ops(seed, 5000, keys)
    reference = {}
    t = replay(make_table(), ops, reference)
    assert dict(t.items()) == reference


@pytest.mark.parametrize("capacities", [(1, 16, 1024), (2, 64, 4096)])
def test_initial_capacity_does_not_change_contents(make_table, capacities):
    keys = list(range(2000))
    ops = random_ops(99, 8000, keys)
    tables = [replay(make_table(initial_capacity=c), ops) for c in capacities]
    contents = [dict(t.items()) for t in tables]
    assert contents[0] == contents[1] == contents[2]
    assert tables[0] == tables[1] == tables[2]


def test_colliding_keys_match_dict(make_table, colliding_key):
    # Few hash codes, many keys: buckets cross the treeify and untreeify
    # thresholds repeatedly.
    keys = [colliding_key(f"k{i:03d}", hash_code=i % 3) for i in range(90)]
    ops = random_ops(5, 6000, keys)
    reference = {}
    t = replay(make_table(initial_capacity=64), ops, reference)
    assert t.size() == len(reference)
    for k in keys:
        if k in reference:
            assert t.get(k) == reference[k]
        else:
            assert t.get(k) is ABSENT
    for i in range(3):
        bucket = t.bucket_at(i)
        if bucket is not None and bucket.mode is BucketMode.TREE:
            assert bucket.tree.check_invariants()
            assert len(bucket) > t.config.untreeify_threshold


def test_numerically_equal_keys_match_dict(make_table):
    # Every key hashes to 7: congruent big ints plus equal numbers of other types
    modulus = sys.hash_info.modulus
    keys = [7 + i * modulus for i in range(20)]
    keys += [7.0, Fraction(7), Decimal(7), complex(7, 0)]
    ops = random_ops(11, 3000, keys)
    reference = {}
    t = replay(make_table(initial_capacity=64), ops, reference)
    assert t.size() == len(reference)
    for k in keys:
        assert t.get(k) == reference.get(k, ABSENT)


def test_case_insensitive_hasher_matches_dict_of_folded_keys(
    make_table, case_insensitive_hasher
):
    rng = random.Random(21)
    # All words have length 4, so they share one bucket
    words = ["".join(rng.choice("abcABC") for _ in range(4)) for _ in range(300)]
    t = make_table(initial_capacity=64, hasher=case_insensitive_hasher)
    reference = {}
    for _ in range(4000):
        word = rng.choice(words)
        if rng.random() < 0.6:
            assert t.put(word, word) == reference.get(word.lower(), ABSENT)
            reference[word.lower()] = word
        else:
            assert t.remove(word) == reference.pop(word.lower(), ABSENT)
        assert t.size() == len(reference)
    for word in words:
        assert t.get(word.upper()) == reference.get(word.lower(), ABSENT)
