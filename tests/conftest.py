import pytest
from prometheus_client import CollectorRegistry

from treehash.metrics import create_table_metrics
from treehash.table import HashTable


class CollidingKey:
    """Key whose hash is fixed, so any number of them share one bucket.

    Orders by name; ``eq_calls``/``lt_calls`` count comparisons made by the
    table across all instances.
    """

    eq_calls = 0
    lt_calls = 0

    def __init__(self, name, hash_code=42):
        self.name = name
        self.hash_code = hash_code

    def __hash__(self):
        return self.hash_code

    def __eq__(self, other):
        CollidingKey.eq_calls += 1
        return isinstance(other, CollidingKey) and self.name == other.name

    def __lt__(self, other):
        CollidingKey.lt_calls += 1
        return self.name < other.name

    def __repr__(self):
        return f"CollidingKey({self.name!r})"

    @classmethod
    def reset_counts(cls):
        cls.eq_calls = 0
        cls.lt_calls = 0


class UnorderedKey:
    """Colliding key with no ordering at all (only the insertion-sequence
    tie-break can place it in a tree)."""

    def __init__(self, name, hash_code=42):
        self.name = name
        self.hash_code = hash_code

    def __hash__(self):
        return self.hash_code

    def __eq__(self, other):
        return isinstance(other, UnorderedKey) and self.name == other.name

    def __repr__(self):
        return f"UnorderedKey({self.name!r})"


class ConstantHasher:
    """Hasher mapping every key to the same hash code."""

    def __init__(self, code=7):
        self.code = code

    def hash(self, key):
        return self.code

    def equals(self, a, b):
        return a == b


class CaseInsensitiveHasher:
    """Case-insensitive string keys, hashed by length so that every string
    of one length collides."""

    def hash(self, key):
        return len(key)

    def equals(self, a, b):
        return a.lower() == b.lower()


class OrderedCaseInsensitiveHasher(CaseInsensitiveHasher):
    """Same equality, plus a key order that agrees with it."""

    def compare(self, a, b):
        a, b = a.lower(), b.lower()
        return (a > b) - (a < b)


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    return create_table_metrics(registry)


@pytest.fixture
def table(metrics):
    return HashTable(metrics=metrics)


@pytest.fixture
def make_table(metrics):
    """Factory for tables bound to the test's private metrics registry."""

    def _make(**kwargs):
        kwargs.setdefault("metrics", metrics)
        return HashTable(**kwargs)

    return _make


@pytest.fixture
def colliding_key():
    CollidingKey.reset_counts()
    return CollidingKey


@pytest.fixture
def unordered_key():
    return UnorderedKey


@pytest.fixture
def constant_hasher():
    return ConstantHasher()


@pytest.fixture(params=[CaseInsensitiveHasher, OrderedCaseInsensitiveHasher])
def case_insensitive_hasher(request):
    return request.param()
