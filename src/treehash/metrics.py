"""metrics.py - Prometheus counters and bucket-distribution statistics"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, NamedTuple

import numpy as np
from prometheus_client import REGISTRY, CollectorRegistry, Counter

from .constants import BucketMode


class TableMetrics(NamedTuple):
    """Structural-event counters shared by every table bound to a registry."""

    resizes: Counter
    treeifications: Counter
    untreeifications: Counter


def create_table_metrics(registry: CollectorRegistry | None = REGISTRY) -> TableMetrics:
    """Create table counters on ``registry`` (the process-global default
    unless given; ``None`` leaves them unregistered)."""
    resizes = Counter(
        "treehash_resizes_total",
        "Total number of bucket-array doublings",
        registry=registry,
    )
    treeifications = Counter(
        "treehash_treeifications_total",
        "Total number of chain buckets converted to trees",
        registry=registry,
    )
    untreeifications = Counter(
        "treehash_untreeifications_total",
        "Total number of tree buckets converted back to chains",
        registry=registry,
    )
    return TableMetrics(resizes, treeifications, untreeifications)


_default_metrics: TableMetrics | None = None


def default_metrics() -> TableMetrics:
    """Metrics on the global registry, created on first use."""
    global _default_metrics
    if _default_metrics is None:
        _default_metrics = create_table_metrics()
    return _default_metrics


class TableStats(NamedTuple):
    capacity: int
    size: int
    load: float
    occupied_buckets: int
    tree_buckets: int
    max_bucket_length: int
    length_histogram: np.ndarray
    "length_histogram[n] = number of buckets holding exactly n entries"


def collect_stats(capacity: int, size: int, buckets: Sequence[Any] | None) -> TableStats:
    """Summarize the bucket array of a table.

    ``buckets`` is None while the table has not allocated its array yet.
    """
    if buckets is None:
        return TableStats(
            capacity=capacity,
            size=size,
            load=0.0,
            occupied_buckets=0,
            tree_buckets=0,
            max_bucket_length=0,
            length_histogram=np.array([capacity], dtype=np.int64),
        )
    lengths = np.fromiter(
        (0 if b is None else len(b) for b in buckets),
        dtype=np.int64,
        count=len(buckets),
    )
    tree_buckets = sum(
        1 for b in buckets if b is not None and b.mode is BucketMode.TREE
    )
    return TableStats(
        capacity=capacity,
        size=size,
        load=size / capacity,
        occupied_buckets=int(np.count_nonzero(lengths)),
        tree_buckets=tree_buckets,
        max_bucket_length=int(lengths.max()) if lengths.size else 0,
        length_histogram=np.bincount(lengths),
    )
