import logging

import numpy as np
from prometheus_client import CollectorRegistry

from treehash.metrics import create_table_metrics, default_metrics


def test_counters_start_at_zero(registry, metrics):
    for name in (
        "treehash_resizes_total",
        "treehash_treeifications_total",
        "treehash_untreeifications_total",
    ):
        assert registry.get_sample_value(name) == 0.0


def test_registries_are_independent(make_table, registry):
    other_registry = CollectorRegistry()
    other = make_table(metrics=create_table_metrics(other_registry))
    for i in range(100):
        other.put(i, i)
    assert other_registry.get_sample_value("treehash_resizes_total") == 4.0
    assert registry.get_sample_value("treehash_resizes_total") == 0.0


def test_default_metrics_are_shared():
    assert default_metrics() is default_metrics()


def test_stats(make_table, colliding_key):
    t = make_table(initial_capacity=64)
    for i in range(10):
        t.put(colliding_key(f"c{i}"), i)
    for i in range(5):
        t.put(i, i)
    stats = t.stats()
    assert stats.capacity == 64
    assert stats.size == 15
    assert stats.load == 15 / 64
    assert stats.occupied_buckets == 6
    assert stats.tree_buckets == 1
    assert stats.max_bucket_length == 10
    assert isinstance(stats.length_histogram, np.ndarray)
    assert stats.length_histogram[0] == 58
    assert stats.length_histogram[1] == 5
    assert stats.length_histogram[10] == 1
    assert int(stats.length_histogram.sum()) == 64


def test_debug_dump(make_table, colliding_key):
    t = make_table(initial_capacity=64)
    for i in range(9):
        t.put(colliding_key(f"c{i}"), i)
    t.put(1, "one")
    dump = t.debug_dump()
    assert "capacity=64" in dump
    assert "TREE (9 entries)" in dump
    assert "CHAIN (1 entries)" in dump
    assert "1 -> 'one'" in dump


def test_structural_events_are_logged(make_table, constant_hasher, caplog):
    t = make_table(initial_capacity=64, hasher=constant_hasher)
    with caplog.at_level(logging.DEBUG, logger="treehash"):
        for i in range(9):
            t.put(f"k{i}", i)
        for i in range(9):
            t.remove(f"k{i}")
    messages = [r.getMessage() for r in caplog.records]
    assert any("Treeified" in m for m in messages)
    assert any("Untreeified" in m for m in messages)
    assert t.bucket_mode("k0") is None


def test_config_rejection_is_logged(caplog):
    from treehash.config import TableConfig
    from treehash.exceptions import TableConfigError

    with caplog.at_level(logging.WARNING, logger="treehash"):
        try:
            TableConfig(load_factor=-1)
        except TableConfigError:
            pass
    assert any("load_factor" in r.getMessage() for r in caplog.records)
