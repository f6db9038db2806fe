"""
Test Fixtures

Factories for journal records with explicit, fixed timestamps.
Nothing here reads the clock, so every scenario replays identically.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional

from journalcore.contracts.base import Timestamp
from journalcore.contracts.signals import SignalCategory, SignalRecord
from journalcore.contracts.organics import OrganicScanRecord, ScanType
from journalcore.contracts.events import OrganicScanned, SignalsDiscovered, SurfaceSignalSource, SurfaceSignalsFound
from journalcore.contracts.surface import SurfaceGenus, SurfaceSignal


BASE_TIME = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
SYSTEM = 10477373803


def ts(offset_seconds: float = 0) -> Timestamp:
    return Timestamp(value=BASE_TIME + timedelta(seconds=offset_seconds))


def make_signal(
    name: str = "$USS_Type_Salvage;",
    category: SignalCategory = SignalCategory.USS,
    at: float = 0,
    time_remaining: Optional[float] = None,
    faction: Optional[str] = None,
    state: Optional[str] = None,
    uss_type: Optional[str] = None,
    threat_level: Optional[int] = None,
    localised_name: Optional[str] = None,
    system_address: Optional[int] = SYSTEM,
) -> SignalRecord:
    return SignalRecord(
        name=name,
        localised_name=localised_name or name,
        category=category,
        recorded_at=ts(at),
        faction=faction,
        state=state,
        uss_type=uss_type,
        threat_level=threat_level,
        time_remaining_seconds=time_remaining,
        system_address=system_address
    )


def make_carrier(name: str = "Carrier-1", at: float = 0, time_remaining: Optional[float] = None) -> SignalRecord:
    return make_signal(name=name, category=SignalCategory.CARRIER, at=at, time_remaining=time_remaining)


def discovered(*signals: SignalRecord, system_address: Optional[int] = SYSTEM) -> SignalsDiscovered:
    return SignalsDiscovered(signals=tuple(signals), system_address=system_address)


def make_scan(
    genus: str = "$Codex_Ent_Bacterial_Genus_Name;",
    species: str = "$Codex_Ent_Bacterial_01_Name;",
    scan_type: ScanType = ScanType.LOG,
    at: float = 0,
    variant: Optional[str] = None,
    base_value: Optional[int] = None,
    body_id: Optional[int] = 7,
    system_address: Optional[int] = SYSTEM,
) -> OrganicScanRecord:
    return OrganicScanRecord.create(
        genus=genus,
        species=species,
        scan_type=scan_type,
        timestamp=ts(at),
        variant=variant,
        base_value=base_value,
        body_id=body_id,
        system_address=system_address
    )


def scanned(**kwargs) -> OrganicScanned:
    return OrganicScanned(scan=make_scan(**kwargs))


def surface_report(
    body_id: int = 7,
    at: float = 0,
    bio_count: int = 3,
    source: SurfaceSignalSource = SurfaceSignalSource.SAA,
    system_address: int = SYSTEM,
) -> SurfaceSignalsFound:
    return SurfaceSignalsFound(
        timestamp=ts(at),
        system_address=system_address,
        body_id=body_id,
        body_name=f"Synuefe AB-C d13-{body_id}",
        signals=(
            SurfaceSignal("$SAA_SignalType_Biological;", bio_count, "Biological"),
            SurfaceSignal("$SAA_SignalType_Geological;", 1, "Geological"),
        ),
        genuses=(SurfaceGenus("$Codex_Ent_Bacterial_Genus_Name;", "Bacterium"),),
        source=source
    )
