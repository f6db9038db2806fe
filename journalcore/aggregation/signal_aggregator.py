"""
Signal Aggregator
=================

Merges the signals reported across many events in one star system
into the list a user should see now.

INVARIANTS:
- The batch log is append-only; batches are never edited or removed
- materialize() never returns two records where one is_same the other
- Output order: newest batch first, within-batch arrival order
- Same appends in same order -> equal materialized sequence
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple

from ..contracts.base import ContractViolation, ErrorCode
from ..contracts.signals import SignalRecord


SignalBatch = Tuple[SignalRecord, ...]


def materialize_batches(batches: Iterable[SignalBatch]) -> Tuple[SignalRecord, ...]:
    """
    Reference deduplication: newest batch to oldest, linear duplicate scan.

    Quadratic in total record count. Batches in this domain hold tens of
    records, not thousands.
    """
    kept: List[SignalRecord] = []
    for batch in reversed(list(batches)):
        for candidate in batch:
            if not any(existing.is_same(candidate) for existing in kept):
                kept.append(candidate)
    return tuple(kept)


def materialize_bucketed(batches: Iterable[SignalBatch]) -> Tuple[SignalRecord, ...]:
    """
    Same output as materialize_batches(), with candidates bucketed by name.

    is_same() requires equal names, so only the candidate's own bucket
    can hold a duplicate.
    """
    kept: List[SignalRecord] = []
    buckets: Dict[str, List[SignalRecord]] = {}
    for batch in reversed(list(batches)):
        for candidate in batch:
            bucket = buckets.setdefault(candidate.name, [])
            if not any(existing.is_same(candidate) for existing in bucket):
                bucket.append(candidate)
                kept.append(candidate)
    return tuple(kept)


class SignalAggregator:
    """
    Append-only log of signal batches for one context (a system visit).

    Not internally locked. One writer appends; readers running on other
    threads must synchronize with that writer themselves.
    """

    def __init__(self, bucketed: bool = False, cache_materialized: bool = True):
        self._batches: List[SignalBatch] = []
        self._bucketed = bucketed
        self._cache_materialized = cache_materialized
        self._materialized: Optional[Tuple[SignalRecord, ...]] = None

    def append(self, batch: Iterable[SignalRecord]) -> SignalBatch:
        """
        Append one event's signals as a single batch.

        Rejects an empty batch; that only happens on malformed input.
        """
        records = tuple(batch)
        if not records:
            raise ContractViolation(
                ErrorCode.EMPTY_BATCH,
                "Signal batch must contain at least one record",
                batch_index=len(self._batches)
            )
        for record in records:
            if not isinstance(record, SignalRecord):
                raise ContractViolation(
                    ErrorCode.INVALID_RECORD,
                    "Signal batch may only contain SignalRecord values",
                    value_type=type(record).__name__
                )

        self._batches.append(records)
        self._materialized = None
        return records

    def materialize(self) -> Tuple[SignalRecord, ...]:
        """Deduplicated signals, most recently introduced first."""
        if self._materialized is not None:
            return self._materialized

        if self._bucketed:
            result = materialize_bucketed(self._batches)
        else:
            result = materialize_batches(self._batches)

        if self._cache_materialized:
            self._materialized = result
        return result

    @property
    def batches(self) -> Tuple[SignalBatch, ...]:
        return tuple(self._batches)

    @property
    def batch_count(self) -> int:
        return len(self._batches)

    @property
    def record_count(self) -> int:
        return sum(len(batch) for batch in self._batches)
