"""
Replay Engine
=============

Rebuilds session state from a JournalLog.

INVARIANT: Replay is deterministic.
Same log up to the same sequence = same snapshot = same state hash.

Session persistence belongs to the host: it stores the ordered events,
and replaying them through a fresh accumulator reproduces the state.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from ..contracts.base import Error
from ..engine import AccumulatorConfig, AccumulatorSnapshot, EventRouter, SessionAccumulator
from .journal_log import JournalLog, LogSequence


@dataclass(frozen=True)
class ReplayResult:
    """
    Result of a replay.

    failures pairs each rejected entry's sequence with its Error; a
    rejected event leaves the state untouched, so replay carries on.
    """
    snapshot: AccumulatorSnapshot
    applied: int
    failures: Tuple[Tuple[LogSequence, Error], ...] = ()

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def state_hash(self) -> str:
        return self.snapshot.state_hash()


def replay_into(
    log: JournalLog,
    accumulator: Optional[SessionAccumulator] = None,
    until_seq: Optional[LogSequence] = None
) -> Tuple[SessionAccumulator, ReplayResult]:
    """Replay the log (up to until_seq) into a fresh or supplied accumulator."""
    accumulator = accumulator or SessionAccumulator()
    applied = 0
    failures = []

    with EventRouter(accumulator) as router:
        for entry in log.replay(until_seq=until_seq):
            result = router.route(entry.event)
            if result.is_success:
                applied += 1
            else:
                failures.append((entry.sequence, result.error))

    return accumulator, ReplayResult(
        snapshot=accumulator.snapshot(),
        applied=applied,
        failures=tuple(failures)
    )


def replay(
    log: JournalLog,
    config: Optional[AccumulatorConfig] = None,
    until_seq: Optional[LogSequence] = None
) -> ReplayResult:
    _, result = replay_into(log, SessionAccumulator(config), until_seq)
    return result


def verify_determinism(log: JournalLog, config: Optional[AccumulatorConfig] = None) -> bool:
    """Two independent replays of the log must agree on the state hash."""
    first = replay(log, config)
    second = replay(log, config)
    return first.state_hash == second.state_hash
