"""
Journal Event Contracts

Closed set of typed events the core accepts. Parsing the raw journal
into these values happens outside this package.

EXHAUSTIVE HANDLING:
====================
JournalEvent is a closed Union and EVENT_TYPES lists every member.
The router dispatches on these types and rejects anything else, so a
new event kind cannot be silently dropped.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional, Tuple, Union

from .base import Timestamp, ContractViolation, ErrorCode
from .signals import SignalRecord
from .organics import OrganicScanRecord
from .surface import SurfaceSignal, SurfaceGenus

if TYPE_CHECKING:
    from ..aggregation.identifier_cache import IdentifierCache


@dataclass(frozen=True)
class SignalsDiscovered:
    """
    One or more signals reported under a single event occurrence.

    A raw occurrence off the journal carries exactly one record; bursts
    sharing a timestamp may be merged into a multi-record batch.
    """
    signals: Tuple[SignalRecord, ...]
    system_address: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.signals, tuple):
            object.__setattr__(self, 'signals', tuple(self.signals))
        if not self.signals:
            raise ContractViolation(
                ErrorCode.EMPTY_BATCH,
                "SignalsDiscovered requires at least one signal",
                system_address=self.system_address
            )
        if not all(isinstance(signal, SignalRecord) for signal in self.signals):
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "SignalsDiscovered accepts SignalRecord values only",
                system_address=self.system_address
            )

    @property
    def timestamp(self) -> Timestamp:
        return self.signals[0].recorded_at

    def merge(self, following: SignalsDiscovered) -> SignalsDiscovered:
        """Return a new batch with the following occurrence's records appended."""
        return SignalsDiscovered(
            signals=self.signals + following.signals,
            system_address=self.system_address
        )

    def occurrences(self) -> Iterator[SignalsDiscovered]:
        """Split back into single-record occurrences, in order."""
        for signal in self.signals:
            yield SignalsDiscovered(signals=(signal,), system_address=self.system_address)

    def contribute_identifiers(self, cache: IdentifierCache) -> None:
        """
        Add name -> localised name for the raw occurrence.

        Must run before any merge: the occurrence carries exactly one record.
        """
        if len(self.signals) != 1:
            raise ContractViolation(
                ErrorCode.MULTIPLE_RECORDS,
                "Identifiers are contributed per occurrence, before merging",
                record_count=len(self.signals)
            )
        for signal in self.signals:
            if signal.name and signal.localised_name:
                cache.put(signal.name, signal.localised_name)


@dataclass(frozen=True)
class OrganicScanned:
    scan: OrganicScanRecord

    def __post_init__(self):
        if not isinstance(self.scan, OrganicScanRecord):
            raise ContractViolation(ErrorCode.INVALID_RECORD, "OrganicScanned requires an OrganicScanRecord")

    @property
    def timestamp(self) -> Timestamp:
        return self.scan.timestamp


class SurfaceSignalSource(Enum):
    SAA = "saa_signals_found"
    FSS = "fss_body_signals"


@dataclass(frozen=True)
class SurfaceSignalsFound:
    """Signal counts for one body, from surface mapping or a body scan."""
    timestamp: Timestamp
    system_address: int
    body_id: int
    body_name: str
    signals: Tuple[SurfaceSignal, ...] = field(default_factory=tuple)
    genuses: Tuple[SurfaceGenus, ...] = field(default_factory=tuple)
    source: SurfaceSignalSource = SurfaceSignalSource.SAA

    def __post_init__(self):
        if not isinstance(self.timestamp, Timestamp):
            raise ContractViolation(ErrorCode.INVALID_RECORD, "SurfaceSignalsFound timestamp must be a Timestamp")
        if not self.body_name:
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "SurfaceSignalsFound body_name must be non-empty",
                body_id=self.body_id
            )
        object.__setattr__(self, 'signals', tuple(self.signals))
        object.__setattr__(self, 'genuses', tuple(self.genuses))

    def contribute_identifiers(self, cache: IdentifierCache) -> None:
        """
        Add type -> localised type for surface mapping reports.

        Body scan (FSS) reports and genus lists contribute nothing.
        """
        if self.source is not SurfaceSignalSource.SAA:
            return
        for signal in self.signals:
            if signal.type and signal.type_localised:
                cache.put(signal.type, signal.type_localised)


JournalEvent = Union[SignalsDiscovered, OrganicScanned, SurfaceSignalsFound]

EVENT_TYPES = (SignalsDiscovered, OrganicScanned, SurfaceSignalsFound)
