"""
Journal Event Log
=================

Append-only event storage with sequence numbering.

INVARIANTS:
- No updates or deletes - append only
- Every entry has monotonic sequence number
- Hash chain for integrity verification
- Deterministic replay: same events in same order -> same hashes

Aggregates are DERIVED from this log by replaying it through an
EventRouter; the log itself holds no derived state.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple
import hashlib

from ..contracts.base import ContractViolation, Error, ErrorCode
from ..contracts.events import EVENT_TYPES, JournalEvent


@dataclass(frozen=True)
class LogSequence:
    """Immutable sequence position in the log."""
    value: int

    def next(self) -> LogSequence:
        return LogSequence(self.value + 1)

    def __lt__(self, other: LogSequence) -> bool:
        return self.value < other.value

    def __le__(self, other: LogSequence) -> bool:
        return self.value <= other.value


def event_digest(event: JournalEvent) -> str:
    """Content hash of an event. Frozen dataclass reprs are deterministic."""
    return hashlib.sha256(repr(event).encode('utf-8')).hexdigest()


@dataclass(frozen=True)
class LogEntry:
    """
    Immutable log entry.
    Once written, never modified; entries form a hash chain.
    """
    sequence: LogSequence
    event: JournalEvent
    previous_hash: str
    entry_hash: str

    @staticmethod
    def compute_hash(sequence: LogSequence, event: JournalEvent, previous_hash: str) -> str:
        hash_content = f"{sequence.value}|{event_digest(event)}|{previous_hash}"
        return hashlib.sha256(hash_content.encode()).hexdigest()

    @staticmethod
    def create(sequence: LogSequence, event: JournalEvent, previous_hash: str) -> LogEntry:
        """Factory for deterministic entry creation."""
        return LogEntry(
            sequence=sequence,
            event=event,
            previous_hash=previous_hash,
            entry_hash=LogEntry.compute_hash(sequence, event, previous_hash)
        )


@dataclass(frozen=True)
class LogState:
    """Immutable snapshot of log state."""
    head_sequence: LogSequence
    head_hash: str
    entry_count: int


class JournalLog:
    """
    Append-only journal event log.

    GUARANTEES:
    ===========
    1. NO updates - entries are immutable once written
    2. NO deletes - log only grows
    3. Deterministic - same events in same order -> same head hash
    4. Verifiable - hash chain ensures integrity
    """

    def __init__(self):
        self._entries: List[LogEntry] = []
        self._sequence_counter = LogSequence(0)
        self._head_hash = ""

    @property
    def state(self) -> LogState:
        return LogState(
            head_sequence=self._sequence_counter,
            head_hash=self._head_hash,
            entry_count=len(self._entries)
        )

    def append(self, event: JournalEvent) -> LogEntry:
        """
        Append an event. This is the ONLY write operation.

        Only JournalEvent members are accepted, so replay never meets
        a value the router cannot dispatch.
        """
        if not isinstance(event, EVENT_TYPES):
            raise ContractViolation(
                ErrorCode.UNKNOWN_EVENT_TYPE,
                "Only JournalEvent values can be logged",
                event_type=type(event).__name__
            )

        new_sequence = self._sequence_counter.next()
        entry = LogEntry.create(
            sequence=new_sequence,
            event=event,
            previous_hash=self._head_hash
        )

        self._entries.append(entry)
        self._sequence_counter = new_sequence
        self._head_hash = entry.entry_hash
        return entry

    def load_verified_entry(self, entry: LogEntry) -> None:
        """
        Load an existing entry, e.g. when a host rehydrates a session.

        VERIFIES:
        1. Sequence is the next in line
        2. Previous hash matches current head
        3. Entry hash is valid for its content
        """
        expected_seq = self._sequence_counter.next()
        if entry.sequence.value != expected_seq.value:
            raise ContractViolation(
                ErrorCode.INVALID_SEQUENCE,
                f"Invalid sequence load: expected {expected_seq.value}, got {entry.sequence.value}"
            )

        if entry.previous_hash != self._head_hash:
            raise ContractViolation(
                ErrorCode.STRUCTURAL_INCONSISTENCY,
                f"Broken hash chain at {entry.sequence.value}"
            )

        computed = LogEntry.compute_hash(entry.sequence, entry.event, entry.previous_hash)
        if computed != entry.entry_hash:
            raise ContractViolation(
                ErrorCode.STRUCTURAL_INCONSISTENCY,
                f"Corrupt entry at {entry.sequence.value}: hash mismatch"
            )

        self._entries.append(entry)
        self._sequence_counter = entry.sequence
        self._head_hash = entry.entry_hash

    def replay(
        self,
        from_seq: Optional[LogSequence] = None,
        until_seq: Optional[LogSequence] = None
    ) -> Iterator[LogEntry]:
        """
        Replay entries in sequence order.

        Args:
            from_seq: Start from this sequence (inclusive), None = start
            until_seq: Stop at this sequence (inclusive), None = end
        """
        start = from_seq.value if from_seq else 1
        end = until_seq.value if until_seq else len(self._entries)

        for entry in self._entries:
            if entry.sequence.value < start:
                continue
            if entry.sequence.value > end:
                break
            yield entry

    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def get_entry(self, sequence: LogSequence) -> Optional[LogEntry]:
        if sequence.value < 1 or sequence.value > len(self._entries):
            return None
        return self._entries[sequence.value - 1]

    def verify_integrity(self) -> Tuple[bool, Optional[Error]]:
        """
        Verify hash chain integrity.

        Returns (is_valid, error); error carries details on failure.
        """
        expected_previous = ""

        for entry in self._entries:
            recomputed = LogEntry.compute_hash(entry.sequence, entry.event, entry.previous_hash)
            if entry.previous_hash != expected_previous or recomputed != entry.entry_hash:
                return (False, Error.create(
                    ErrorCode.STRUCTURAL_INCONSISTENCY,
                    f"Hash chain broken at sequence {entry.sequence.value}",
                    expected_hash=expected_previous,
                    actual_hash=entry.previous_hash
                ))
            expected_previous = entry.entry_hash

        return (True, None)

    def __len__(self) -> int:
        return len(self._entries)
