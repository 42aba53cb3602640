import math

import pytest

from treehash.config import TableConfig
from treehash.exceptions import TableConfigError
from treehash.table import HashTable


def test_defaults():
    config = TableConfig()
    assert config.initial_capacity == 16
    assert config.load_factor == 0.75
    assert config.treeify_threshold == 8
    assert config.untreeify_threshold == 6
    assert config.min_treeify_capacity == 64
    assert config.capacity == 16


@pytest.mark.parametrize(
    "field,value",
    [
        ("initial_capacity", -1),
        ("initial_capacity", 1.5),
        ("load_factor", 0),
        ("load_factor", -0.5),
        ("load_factor", math.nan),
        ("load_factor", math.inf),
        ("treeify_threshold", 1),
        ("untreeify_threshold", -1),
        ("untreeify_threshold", 8),
        ("min_treeify_capacity", 0),
    ],
)
def test_rejects_out_of_range(field, value):
    with pytest.raises(TableConfigError) as exc:
        TableConfig(**{field: value})
    assert exc.value.field == field
    assert isinstance(exc.value, ValueError)


def test_config_is_immutable():
    config = TableConfig()
    with pytest.raises(AttributeError):
        config.load_factor = 0.5


def test_with_overrides_revalidates():
    config = TableConfig().with_overrides(initial_capacity=100)
    assert config.capacity == 128
    with pytest.raises(TableConfigError):
        config.with_overrides(treeify_threshold=3)


def test_table_accepts_config_and_overrides(metrics):
    base = TableConfig(load_factor=0.5)
    t = HashTable(base, initial_capacity=64, metrics=metrics)
    assert t.config.load_factor == 0.5
    assert t.capacity == 64
    assert t.threshold == 32

    t = HashTable(initial_capacity=8, load_factor=1.0, metrics=metrics)
    assert t.threshold == 8


def test_table_rejects_bad_config_type(metrics):
    with pytest.raises(AssertionError):
        HashTable({"load_factor": 0.5}, metrics=metrics)
