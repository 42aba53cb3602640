"""config.py - Table configuration for treehash"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from .constants import (
    DEFAULT_INITIAL_CAPACITY,
    DEFAULT_LOAD_FACTOR,
    MIN_TREEIFY_CAPACITY,
    TREEIFY_THRESHOLD,
    UNTREEIFY_THRESHOLD,
)
from .exceptions import TableConfigError
from .logger import get_logger
from .utils import table_size_for

logger = get_logger(__name__)


@dataclass(frozen=True)
class TableConfig:
    """Sizing and bucket-representation parameters of a HashTable.

    Immutable: derive variants with ``with_overrides`` instead of mutating.
    ``initial_capacity`` is the requested size; the table rounds it up to a
    power of two (see ``capacity``).
    """

    initial_capacity: int = DEFAULT_INITIAL_CAPACITY
    load_factor: float = DEFAULT_LOAD_FACTOR

    # Chain -> tree when a chain grows past treeify_threshold, but only once
    # the table holds at least min_treeify_capacity buckets.
    treeify_threshold: int = TREEIFY_THRESHOLD
    # Tree -> chain at or below this count (removal or resize split)
    untreeify_threshold: int = UNTREEIFY_THRESHOLD
    min_treeify_capacity: int = MIN_TREEIFY_CAPACITY

    def __post_init__(self) -> None:
        self._check(
            "initial_capacity",
            self.initial_capacity,
            isinstance(self.initial_capacity, int) and self.initial_capacity >= 0,
            "must be a non-negative int",
        )
        self._check(
            "load_factor",
            self.load_factor,
            isinstance(self.load_factor, (int, float))
            and math.isfinite(self.load_factor)
            and self.load_factor > 0,
            "must be a finite number > 0",
        )
        self._check(
            "treeify_threshold",
            self.treeify_threshold,
            isinstance(self.treeify_threshold, int) and self.treeify_threshold >= 2,
            "must be an int >= 2",
        )
        self._check(
            "untreeify_threshold",
            self.untreeify_threshold,
            isinstance(self.untreeify_threshold, int)
            and 0 <= self.untreeify_threshold < self.treeify_threshold,
            f"must be an int in [0, treeify_threshold={self.treeify_threshold})",
        )
        self._check(
            "min_treeify_capacity",
            self.min_treeify_capacity,
            isinstance(self.min_treeify_capacity, int)
            and self.min_treeify_capacity >= 1,
            "must be an int >= 1",
        )

    @staticmethod
    def _check(field: str, value, ok: bool, reason: str) -> None:
        if not ok:
            logger.warning(f"Rejecting table config {field}={value!r}: {reason}")
            raise TableConfigError(field, value, reason)

    @property
    def capacity(self) -> int:
        """Initial bucket-array length: initial_capacity rounded to a power of two."""
        return table_size_for(self.initial_capacity)

    def with_overrides(self, **changes) -> TableConfig:
        """Return a copy with the given fields replaced (validated again)."""
        return replace(self, **changes)
