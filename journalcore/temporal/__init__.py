"""
Temporal Layer
==============

Event-sourced persistence support for the accumulator.

INVARIANTS:
- The journal log is append-only
- All aggregate state is derived by replaying the log
- Same log -> same derived state (deterministic)

Modules:
- journal_log: Append-only, hash-chained event storage
- replay: Rebuild and verify state from a log
"""

from .journal_log import JournalLog, LogEntry, LogSequence, LogState
from .replay import ReplayResult, replay, replay_into, verify_determinism

__all__ = [
    'JournalLog',
    'LogEntry',
    'LogSequence',
    'LogState',
    'ReplayResult',
    'replay',
    'replay_into',
    'verify_determinism',
]
