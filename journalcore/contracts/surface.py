"""
Surface Signal Contracts

Per-body signal counts reported by surface mapping (SAA) and by
full-spectrum body scans (FSS), plus the genus list that newer
surface mapping reports carry.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional

from .base import ContractViolation, ErrorCode


class SurfaceSignalKind(Enum):
    """Kind derived from the $SAA_SignalType_<X>; marker in the type string."""
    GEOLOGICAL = "geological"
    BIOLOGICAL = "biological"
    THARGOID = "thargoid"
    GUARDIAN = "guardian"
    HUMAN = "human"
    OTHER = "other"
    UNCATEGORISED = "uncategorised"


_MARKERS = (
    ("$SAA_SignalType_Geological;", SurfaceSignalKind.GEOLOGICAL),
    ("$SAA_SignalType_Biological;", SurfaceSignalKind.BIOLOGICAL),
    ("$SAA_SignalType_Thargoid;", SurfaceSignalKind.THARGOID),
    # anomalies are associated with thargoid activity
    ("$SAA_SignalType_PlanetAnomaly;", SurfaceSignalKind.THARGOID),
    ("$SAA_SignalType_Guardian;", SurfaceSignalKind.GUARDIAN),
    ("$SAA_SignalType_Human;", SurfaceSignalKind.HUMAN),
    ("$SAA_SignalType_Other;", SurfaceSignalKind.OTHER),
)


@dataclass(frozen=True)
class SurfaceSignal:
    type: str
    count: int
    type_localised: Optional[str] = None

    def __post_init__(self):
        if not self.type:
            raise ContractViolation(ErrorCode.INVALID_RECORD, "SurfaceSignal type must be non-empty")
        if self.count < 0:
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "SurfaceSignal count must not be negative",
                type=self.type
            )

    @property
    def kind(self) -> SurfaceSignalKind:
        for marker, kind in _MARKERS:
            if marker in self.type:
                return kind
        # probably a material
        return SurfaceSignalKind.UNCATEGORISED

    @property
    def display_name(self) -> str:
        return self.type_localised or self.type


@dataclass(frozen=True)
class SurfaceGenus:
    genus: str
    genus_localised: Optional[str] = None

    def __post_init__(self):
        if not self.genus:
            raise ContractViolation(ErrorCode.INVALID_RECORD, "SurfaceGenus genus must be non-empty")


def count_by_kind(signals: Iterable[SurfaceSignal]) -> Dict[SurfaceSignalKind, int]:
    """Sum signal counts per kind; every kind is present in the result."""
    counts = {kind: 0 for kind in SurfaceSignalKind}
    for signal in signals:
        counts[signal.kind] += signal.count
    return counts


def contains(signals: Iterable[SurfaceSignal], fdname: str) -> int:
    """Count for the first signal whose type matches fdname (case-insensitive), else 0."""
    wanted = fdname.casefold()
    for signal in signals:
        if signal.type.casefold() == wanted:
            return signal.count
    return 0
