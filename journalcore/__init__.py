"""
journalcore
===========

Stateful aggregation over an ordered stream of journal events.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Typed, immutable records and the closed JournalEvent variant
   - Boundary validation raises ContractViolation

2. AGGREGATION (aggregation/)
   - SignalAggregator: deduplicated, newest-first signal view
   - OrganicScanReducer: latest valid progress per organism
   - IdentifierCache: raw id -> display text with generation counter

3. ENGINE (engine.py)
   - SessionAccumulator: single-writer owner of all aggregates
   - EventRouter: exhaustive per-event dispatch, returns Result

4. TEMPORAL (temporal/)
   - JournalLog: append-only, hash-chained event log
   - Replay: rebuild identical state from a log

5. OBSERVABILITY (observability/)
   - Audit entries and counters; never changes behaviour

CONSTRAINTS ENFORCED:
=====================
- Deterministic: the same ordered events always produce the same views
- Single writer: mutation requires the exclusive writer handle
- Explicit errors: validation failures are returned, never fatal
"""

from .contracts.base import ContractViolation, Error, ErrorCode, Result, Timestamp
from .contracts.signals import CARRIER_EXPIRY_SECONDS, SignalCategory, SignalRecord
from .contracts.organics import OrganicScanRecord, ScanType
from .contracts.surface import SurfaceGenus, SurfaceSignal, SurfaceSignalKind
from .contracts.events import (
    EVENT_TYPES, JournalEvent, OrganicScanned, SignalsDiscovered,
    SurfaceSignalSource, SurfaceSignalsFound
)
from .classification import classify_signal
from .aggregation import IdentifierCache, OrganicProgress, OrganicScanReducer, SignalAggregator
from .engine import (
    AccumulatorConfig, AccumulatorSnapshot, AccumulatorWriter,
    EventRouter, SessionAccumulator
)

__all__ = [
    'ContractViolation',
    'Error',
    'ErrorCode',
    'Result',
    'Timestamp',
    'CARRIER_EXPIRY_SECONDS',
    'SignalCategory',
    'SignalRecord',
    'OrganicScanRecord',
    'ScanType',
    'SurfaceGenus',
    'SurfaceSignal',
    'SurfaceSignalKind',
    'EVENT_TYPES',
    'JournalEvent',
    'OrganicScanned',
    'SignalsDiscovered',
    'SurfaceSignalSource',
    'SurfaceSignalsFound',
    'classify_signal',
    'IdentifierCache',
    'OrganicProgress',
    'OrganicScanReducer',
    'SignalAggregator',
    'AccumulatorConfig',
    'AccumulatorSnapshot',
    'AccumulatorWriter',
    'EventRouter',
    'SessionAccumulator',
]
