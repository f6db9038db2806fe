"""
Signal Contracts

Immutable values for ambient signals reported while in a star system.

DEDUPLICATION IDENTITY:
=======================
Two records describe the same signal when name, faction, state,
USS type and threat level match, and either the record is a carrier
or both expire at exactly the same instant. Carrier countdowns reset
themselves, so they never take part in identity.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Optional

from .base import Timestamp, ContractViolation, ErrorCode


# Days till a carrier signal is considered gone
CARRIER_EXPIRY_SECONDS = 10 * (60 * 60 * 24)

NO_FACTION = "$faction_none;"


class SignalCategory(Enum):
    """Closed classification taxonomy for ambient signals."""
    STATION = "station"
    CARRIER = "carrier"
    MEGASHIP = "megaship"
    INSTALLATION = "installation"
    CONFLICT_ZONE = "conflict_zone"
    RESOURCE_EXTRACTION = "resource_extraction"
    NOTABLE_STELLAR_PHENOMENA = "notable_stellar_phenomena"
    USS = "uss"
    OTHER = "other"


# (name, signal_type, is_station, localised_name) -> category
Classifier = Callable[[str, Optional[str], bool, Optional[str]], SignalCategory]


def check_localisation(localised: Optional[str], fallback: Optional[str]) -> Optional[str]:
    """
    Return the localised text, or the fallback when the localised text is
    absent or is itself an untranslated `$...;` identifier.
    """
    if localised and not (localised.startswith("$") and localised.endswith(";")):
        return localised
    return fallback or None


@dataclass(frozen=True)
class SignalRecord:
    """
    IMMUTABLE value parsed from one signal-discovered occurrence.

    Use SignalRecord.create() for values coming off the wire; it applies
    the localisation fallbacks, classification and the carrier horizon.
    """
    name: str
    localised_name: str
    category: SignalCategory
    recorded_at: Timestamp
    signal_type: Optional[str] = None
    is_station: Optional[bool] = None
    faction: Optional[str] = None
    faction_localised: Optional[str] = None
    state: Optional[str] = None
    state_localised: Optional[str] = None
    threat_level: Optional[int] = None
    uss_type: Optional[str] = None
    uss_type_localised: Optional[str] = None
    time_remaining_seconds: Optional[float] = None
    system_address: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "SignalRecord name must be a non-empty string"
            )
        if not isinstance(self.recorded_at, Timestamp):
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "SignalRecord recorded_at must be a Timestamp",
                name=self.name
            )
        if not isinstance(self.category, SignalCategory):
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "SignalRecord category must be a SignalCategory",
                name=self.name
            )
        if not self.localised_name:
            object.__setattr__(self, 'localised_name', self.name)
        if self.category is SignalCategory.CARRIER:
            object.__setattr__(self, 'time_remaining_seconds', float(CARRIER_EXPIRY_SECONDS))

    @staticmethod
    def create(
        name: str,
        recorded_at: Timestamp,
        localised_name: Optional[str] = None,
        signal_type: Optional[str] = None,
        is_station: Optional[bool] = None,
        faction: Optional[str] = None,
        faction_localised: Optional[str] = None,
        state: Optional[str] = None,
        state_localised: Optional[str] = None,
        threat_level: Optional[int] = None,
        uss_type: Optional[str] = None,
        uss_type_localised: Optional[str] = None,
        time_remaining_seconds: Optional[float] = None,
        system_address: Optional[int] = None,
        classifier: Optional[Classifier] = None,
    ) -> SignalRecord:
        """Factory for records built from already-parsed event fields."""
        if classifier is None:
            from ..classification import classify_signal
            classifier = classify_signal

        faction_localised = check_localisation(faction_localised, faction)
        if faction is not None and faction.lower() == NO_FACTION:
            faction = faction_localised = None

        category = classifier(name, signal_type, is_station is True, localised_name)

        return SignalRecord(
            name=name,
            # Proper names usually arrive without localisation; keep them as-is
            localised_name=localised_name or name,
            category=category,
            recorded_at=recorded_at,
            signal_type=signal_type or None,
            is_station=is_station,
            faction=faction or None,
            faction_localised=faction_localised,
            state=state or None,
            state_localised=check_localisation(state_localised, state),
            threat_level=threat_level,
            uss_type=uss_type or None,
            uss_type_localised=check_localisation(uss_type_localised, uss_type),
            time_remaining_seconds=time_remaining_seconds,
            system_address=system_address
        )

    @property
    def expires_at(self) -> Optional[Timestamp]:
        if self.time_remaining_seconds is None:
            return None
        return self.recorded_at.plus_seconds(self.time_remaining_seconds)

    @property
    def is_carrier(self) -> bool:
        return self.category is SignalCategory.CARRIER

    def is_same(self, other: SignalRecord) -> bool:
        """True when other describes the same signal as this one."""
        return (
            self.name == other.name
            and self.faction == other.faction
            and self.state == other.state
            and self.uss_type == other.uss_type
            and self.threat_level == other.threat_level
            and (self.is_carrier or self.expires_at == other.expires_at)
        )

    def is_expired(self, at: Timestamp) -> bool:
        expires = self.expires_at
        return expires is not None and expires <= at


def count_by_category(records: Iterable[SignalRecord]) -> Dict[SignalCategory, int]:
    """Count records per category; every category is present in the result."""
    counts = {category: 0 for category in SignalCategory}
    for record in records:
        counts[record.category] += 1
    return counts
