"""
Engine Orchestration Module

Owns the aggregates for one session and routes typed journal events
into them.

DESIGN PRINCIPLES:
==================
1. One accumulation owner per session; all aggregates live here
2. Mutation only through the exclusive AccumulatorWriter handle
3. Readers get frozen snapshots, never the live structures
4. Validation failures come back as Result, never as a crash
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
import hashlib
import logging
import os

from .contracts.base import ContractViolation, Error, ErrorCode, Result
from .contracts.signals import SignalRecord
from .contracts.organics import OrganicScanRecord
from .contracts.events import (
    EVENT_TYPES, JournalEvent, OrganicScanned, SignalsDiscovered,
    SurfaceSignalSource, SurfaceSignalsFound
)
from .aggregation import IdentifierCache, OrganicProgress, OrganicScanReducer, SignalAggregator
from .observability import AuditEventType, ObservabilityConfig, ObservabilityEngine


logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass
class AccumulatorConfig:
    """Configuration for a session accumulator."""
    bucket_signal_index: bool = False
    cache_materialized: bool = True
    observability: Optional[ObservabilityConfig] = None

    def __post_init__(self):
        self.observability = self.observability or ObservabilityConfig()

    @staticmethod
    def from_env() -> AccumulatorConfig:
        """Defaults overridden by JOURNALCORE_* environment variables."""
        enabled = _env_flag("JOURNALCORE_OBSERVABILITY", True)
        return AccumulatorConfig(
            bucket_signal_index=_env_flag("JOURNALCORE_BUCKET_INDEX", False),
            cache_materialized=_env_flag("JOURNALCORE_CACHE_MATERIALIZED", True),
            observability=ObservabilityConfig(enable_audit=enabled, enable_metrics=enabled)
        )


# =============================================================================
# PER-SYSTEM STATE
# =============================================================================

class SystemContext:
    """Aggregates for one star system."""

    def __init__(self, system_address: Optional[int], config: AccumulatorConfig):
        self.system_address = system_address
        self.signals = SignalAggregator(
            bucketed=config.bucket_signal_index,
            cache_materialized=config.cache_materialized
        )
        self.organics: Dict[Optional[int], OrganicScanReducer] = {}
        self.surface: Dict[Tuple[int, SurfaceSignalSource], SurfaceSignalsFound] = {}

    def snapshot(self) -> SystemSnapshot:
        return SystemSnapshot(
            system_address=self.system_address,
            signals=self.signals.materialize(),
            organics=tuple(
                (body_id, reducer.progress()) for body_id, reducer in self.organics.items()
            ),
            surface=tuple(self.surface.values())
        )


@dataclass(frozen=True)
class SystemSnapshot:
    """Frozen view of one system's aggregates."""
    system_address: Optional[int]
    signals: Tuple[SignalRecord, ...]
    organics: Tuple[Tuple[Optional[int], Tuple[OrganicProgress, ...]], ...]
    surface: Tuple[SurfaceSignalsFound, ...]

    def organics_for(self, body_id: Optional[int]) -> Tuple[OrganicProgress, ...]:
        for body, progress in self.organics:
            if body == body_id:
                return progress
        return ()

    def surface_for(self, body_id: int) -> Tuple[SurfaceSignalsFound, ...]:
        return tuple(report for report in self.surface if report.body_id == body_id)


@dataclass(frozen=True)
class AccumulatorSnapshot:
    """
    Stable, owner-produced view handed to readers.

    state_hash() is a pure function of the contents, so two replays of
    the same events give the same hash.
    """
    systems: Tuple[SystemSnapshot, ...]
    identifiers: Tuple[Tuple[str, str], ...]
    identifier_generation: int

    def system(self, system_address: Optional[int]) -> Optional[SystemSnapshot]:
        for snapshot in self.systems:
            if snapshot.system_address == system_address:
                return snapshot
        return None

    def state_hash(self) -> str:
        content = repr((self.systems, self.identifiers, self.identifier_generation))
        return hashlib.sha256(content.encode('utf-8')).hexdigest()


# =============================================================================
# SESSION ACCUMULATOR + WRITER HANDLE
# =============================================================================

class SessionAccumulator:
    """
    Exclusive owner of the aggregates for one session/history.

    SINGLE WRITER:
    ==============
    Writes go through the handle returned by open_writer(); only one
    handle may be open at a time. There is no internal lock: readers on
    other threads calling snapshot() while a writer is active must
    synchronize with the writer themselves.
    """

    def __init__(self, config: Optional[AccumulatorConfig] = None):
        self._config = config or AccumulatorConfig()
        self._systems: Dict[Optional[int], SystemContext] = {}
        self._identifiers = IdentifierCache()
        self._writer: Optional[AccumulatorWriter] = None

    @property
    def config(self) -> AccumulatorConfig:
        return self._config

    @property
    def identifier_generation(self) -> int:
        return self._identifiers.generation

    def lookup_identifier(self, raw_id: str, return_absent_as_none: bool = False) -> Optional[str]:
        return self._identifiers.get(raw_id, return_absent_as_none)

    def open_writer(self) -> AccumulatorWriter:
        if self._writer is not None and self._writer.active:
            raise ContractViolation(
                ErrorCode.WRITER_CONFLICT,
                "A writer is already open on this accumulator"
            )
        self._writer = AccumulatorWriter(self)
        return self._writer

    def _release(self, writer: AccumulatorWriter) -> None:
        if self._writer is writer:
            self._writer = None

    def _context(self, system_address: Optional[int]) -> SystemContext:
        context = self._systems.get(system_address)
        if context is None:
            context = self._systems[system_address] = SystemContext(system_address, self._config)
        return context

    def materialize_signals(self, system_address: Optional[int]) -> Tuple[SignalRecord, ...]:
        context = self._systems.get(system_address)
        return context.signals.materialize() if context else ()

    def organic_progress(
        self,
        system_address: Optional[int],
        body_id: Optional[int]
    ) -> Tuple[OrganicProgress, ...]:
        context = self._systems.get(system_address)
        if context is None or body_id not in context.organics:
            return ()
        return context.organics[body_id].progress()

    def snapshot(self) -> AccumulatorSnapshot:
        return AccumulatorSnapshot(
            systems=tuple(context.snapshot() for context in self._systems.values()),
            identifiers=tuple(self._identifiers.items.items()),
            identifier_generation=self._identifiers.generation
        )


class AccumulatorWriter:
    """
    Exclusive mutation handle for a SessionAccumulator.

    Usable as a context manager; leaving the block releases the handle.
    """

    def __init__(self, owner: SessionAccumulator):
        self._owner = owner
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def _check(self) -> SessionAccumulator:
        if not self._active:
            raise ContractViolation(
                ErrorCode.WRITER_RELEASED,
                "Writer handle has been released"
            )
        return self._owner

    def append_signals(
        self,
        system_address: Optional[int],
        batch: Tuple[SignalRecord, ...]
    ) -> Tuple[SignalRecord, ...]:
        return self._check()._context(system_address).signals.append(batch)

    def add_organic(self, record: OrganicScanRecord) -> None:
        context = self._check()._context(record.system_address)
        reducer = context.organics.get(record.body_id)
        if reducer is None:
            reducer = context.organics[record.body_id] = OrganicScanReducer()
        reducer.add(record)

    def record_surface(self, report: SurfaceSignalsFound) -> None:
        context = self._check()._context(report.system_address)
        key = (report.body_id, report.source)
        # a newer report for the same body and source replaces the older one
        context.surface.pop(key, None)
        context.surface[key] = report

    @property
    def identifiers(self) -> IdentifierCache:
        return self._check()._identifiers

    def release(self) -> None:
        if self._active:
            self._active = False
            self._owner._release(self)

    def __enter__(self) -> AccumulatorWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


# =============================================================================
# EVENT ROUTER
# =============================================================================

@dataclass(frozen=True)
class RouteOutcome:
    """What one routed event changed."""
    event_kind: str
    system_address: Optional[int]
    records_added: int
    identifier_writes: int


class EventRouter:
    """
    Dispatches typed journal events to the accumulator.

    Holds the accumulator's writer handle for its lifetime. Every member
    of EVENT_TYPES must have a handler; construction fails otherwise.
    """

    def __init__(
        self,
        accumulator: SessionAccumulator,
        observability: Optional[ObservabilityEngine] = None
    ):
        self._accumulator = accumulator
        self._writer = accumulator.open_writer()
        self._observability = observability or ObservabilityEngine(accumulator.config.observability)

        self._handlers: Dict[type, Callable[[JournalEvent], RouteOutcome]] = {
            SignalsDiscovered: self._route_signals,
            OrganicScanned: self._route_organic,
            SurfaceSignalsFound: self._route_surface,
        }
        missing = [t.__name__ for t in EVENT_TYPES if t not in self._handlers]
        if missing:
            self._writer.release()
            raise TypeError(f"EventRouter has no handler for: {', '.join(missing)}")

    @property
    def observability(self) -> ObservabilityEngine:
        return self._observability

    def route(self, event: JournalEvent) -> Result:
        """
        Apply one event. Returns Result.success(RouteOutcome) or
        Result.failure(Error); validation problems never raise.
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            return self._reject(ContractViolation(
                ErrorCode.UNKNOWN_EVENT_TYPE,
                "Event type is not part of JournalEvent",
                event_type=type(event).__name__
            ).error)

        try:
            outcome = handler(event)
        except ContractViolation as exc:
            return self._reject(exc.error.with_context("event_type", type(event).__name__))

        self._observability.count("events_routed_total", kind=outcome.event_kind)
        self._observability.log_audit(
            action=f"route_{outcome.event_kind}",
            layer="router",
            event_type=AuditEventType.ROUTED,
            entity_id=str(outcome.system_address),
            records_added=outcome.records_added,
            identifier_writes=outcome.identifier_writes
        )
        return Result.success(outcome)

    def route_all(self, events) -> List[Result]:
        return [self.route(event) for event in events]

    def close(self) -> None:
        self._writer.release()

    def __enter__(self) -> EventRouter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _reject(self, error: Error) -> Result:
        logger.warning("Rejected journal event: %s (%s)", error.message, error.code.name)
        self._observability.count("validation_failures_total", code=error.code.name)
        self._observability.log_audit(
            action="reject",
            layer="router",
            event_type=AuditEventType.VALIDATION_FAILURE,
            code=error.code.name,
            message=error.message
        )
        return Result.failure(error)

    def _contribute(self, event) -> int:
        cache = self._writer.identifiers
        before = cache.generation
        event.contribute_identifiers(cache)
        writes = cache.generation - before
        if writes:
            self._observability.count("identifier_writes_total", writes)
            self._observability.log_audit(
                action="identifiers_updated",
                layer="identifiers",
                generation=cache.generation,
                writes=writes
            )
        return writes

    def _route_signals(self, event: SignalsDiscovered) -> RouteOutcome:
        system_address = event.system_address
        if system_address is None:
            system_address = event.signals[0].system_address

        # identifiers come from each raw occurrence, before the batch is merged
        writes = sum(self._contribute(occurrence) for occurrence in event.occurrences())
        batch = self._writer.append_signals(system_address, event.signals)

        self._observability.count("signal_batches_total")
        self._observability.log_audit(
            action="batch_appended",
            layer="signals",
            entity_id=str(system_address),
            records=len(batch)
        )
        return RouteOutcome("signals", system_address, len(batch), writes)

    def _route_organic(self, event: OrganicScanned) -> RouteOutcome:
        scan = event.scan
        self._writer.add_organic(scan)

        self._observability.count("organic_scans_total", scan_type=scan.scan_type.name)
        self._observability.log_audit(
            action="scan_recorded",
            layer="organics",
            entity_id=str(scan.body_id),
            genus=scan.genus,
            species=scan.species,
            scan_type=scan.scan_type.name
        )
        return RouteOutcome("organic", scan.system_address, 1, 0)

    def _route_surface(self, event: SurfaceSignalsFound) -> RouteOutcome:
        writes = self._contribute(event)
        self._writer.record_surface(event)

        self._observability.count("surface_reports_total", source=event.source.value)
        self._observability.log_audit(
            action="surface_recorded",
            layer="surface",
            entity_id=event.body_name,
            signals=len(event.signals),
            genuses=len(event.genuses)
        )
        return RouteOutcome("surface", event.system_address, len(event.signals), writes)
