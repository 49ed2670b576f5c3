"""
Evaluation History

Run-lifetime memo table of trained candidates, keyed by the exact input mask.
Guarantees that a bit-pattern is handed to the model evaluator at most once
per run. Safe to read and write from concurrent evaluation threads.
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from ga_constants import FAILED_PERFORMANCE


Mask = Tuple[bool, ...]


@dataclass(frozen=True)
class PerformanceRecord:
    """Training and selection performance of one trained candidate (lower is better)."""
    training_performance: float
    selection_performance: float
    failed: bool = False

    @classmethod
    def failure(cls) -> 'PerformanceRecord':
        """Record stored for a candidate whose training failed."""
        return cls(FAILED_PERFORMANCE, FAILED_PERFORMANCE, failed=True)


@dataclass(frozen=True)
class HistoryEntry:
    """A stored evaluation: its performance, trained parameters and insertion order."""
    record: PerformanceRecord
    parameters: Any
    order: int


class EvaluationHistory:
    """Thread-safe associative table from input mask to its first evaluation."""

    def __init__(self):
        self._entries: Dict[Mask, HistoryEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key(mask: Sequence[bool]) -> Mask:
        """Canonical hashable key for a mask."""
        return tuple(bool(flag) for flag in mask)

    def get(self, mask: Sequence[bool]) -> Optional[HistoryEntry]:
        """Look a mask up, counting the lookup as a hit or a miss."""
        key = self.key(mask)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
            else:
                self.hits += 1
            return entry

    def set(self, mask: Sequence[bool], record: PerformanceRecord, parameters: Any = None) -> HistoryEntry:
        """
        Insert or overwrite the evaluation of a mask.

        Overwriting keeps the original insertion order, so concurrent writers
        of the same pattern leave an equivalent table behind.
        """
        key = self.key(mask)
        with self._lock:
            previous = self._entries.get(key)
            order = previous.order if previous is not None else len(self._entries)
            entry = HistoryEntry(record=record, parameters=parameters, order=order)
            self._entries[key] = entry
            return entry

    def peek(self, mask: Sequence[bool]) -> Optional[HistoryEntry]:
        """Look a mask up without touching the hit/miss counters."""
        with self._lock:
            return self._entries.get(self.key(mask))

    def __contains__(self, mask) -> bool:
        with self._lock:
            return self.key(mask) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def items(self) -> Iterator[Tuple[Mask, HistoryEntry]]:
        """Entries in insertion order (a snapshot)."""
        with self._lock:
            snapshot = list(self._entries.items())
        return iter(sorted(snapshot, key=lambda item: item[1].order))

    def best(self) -> Optional[Tuple[Mask, HistoryEntry]]:
        """
        Best evaluation ever recorded: lowest selection performance, ties broken
        by lower training performance, then by earliest insertion.
        Successful evaluations always win over failed ones.
        """
        best_item = None
        for mask, entry in self.items():
            if best_item is None or self._sort_key(entry) < self._sort_key(best_item[1]):
                best_item = (mask, entry)
        return best_item

    @staticmethod
    def _sort_key(entry: HistoryEntry):
        record = entry.record
        return (record.failed, record.selection_performance, record.training_performance, entry.order)

    def get_stats(self) -> Tuple[int, int, float, int]:
        """Return statistics: (hits, misses, hit_rate, size)."""
        with self._lock:
            total_requests = self.hits + self.misses
            hit_rate = self.hits / total_requests if total_requests > 0 else 0.0
            return self.hits, self.misses, hit_rate, len(self._entries)

    def clear(self) -> None:
        """Drop every entry and reset the statistics."""
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0
