"""
Organic Scan Contracts

One value per scan action (Log, Sample, Analyse) against one organism.
A complete sequence is Log -> Sample -> Sample -> Analyse.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .base import Timestamp, ContractViolation, ErrorCode


UNKNOWN_ORGANISM = "Unknown"

OrganismKey = Tuple[str, str, str]


class ScanType(Enum):
    """Ordered scan stages."""
    LOG = 1
    SAMPLE = 2
    ANALYSE = 3

    @property
    def stage(self) -> int:
        return self.value

    def __lt__(self, other: ScanType) -> bool:
        if not isinstance(other, ScanType):
            return NotImplemented
        return self.value < other.value


def _strip_prefix(text: str, prefix: str) -> str:
    return text[len(prefix):] if prefix and text.startswith(prefix) else text


@dataclass(frozen=True)
class OrganicScanRecord:
    """
    IMMUTABLE scan action.

    estimated_value is only set on ANALYSE records and
    potential_estimated_value only on LOG/SAMPLE records.
    """
    genus: str
    species: str
    scan_type: ScanType
    timestamp: Timestamp
    variant: Optional[str] = None
    genus_localised: Optional[str] = None
    species_localised: Optional[str] = None
    variant_localised: Optional[str] = None
    estimated_value: Optional[int] = None
    potential_estimated_value: Optional[int] = None
    system_address: Optional[int] = None
    body_id: Optional[int] = None

    def __post_init__(self):
        if not self.genus or not self.species:
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "OrganicScanRecord genus and species must be non-empty"
            )
        if not isinstance(self.scan_type, ScanType):
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "OrganicScanRecord scan_type must be a ScanType",
                genus=self.genus,
                species=self.species
            )
        if not isinstance(self.timestamp, Timestamp):
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "OrganicScanRecord timestamp must be a Timestamp",
                genus=self.genus,
                species=self.species
            )
        if self.estimated_value is not None and self.scan_type is not ScanType.ANALYSE:
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "estimated_value is only valid on Analyse scans",
                scan_type=self.scan_type.name
            )
        if self.potential_estimated_value is not None and self.scan_type is ScanType.ANALYSE:
            raise ContractViolation(
                ErrorCode.INVALID_RECORD,
                "potential_estimated_value is not valid on Analyse scans",
                scan_type=self.scan_type.name
            )

    @staticmethod
    def create(
        genus: Optional[str],
        species: Optional[str],
        scan_type: ScanType,
        timestamp: Timestamp,
        variant: Optional[str] = None,
        genus_localised: Optional[str] = None,
        species_localised: Optional[str] = None,
        variant_localised: Optional[str] = None,
        base_value: Optional[int] = None,
        system_address: Optional[int] = None,
        body_id: Optional[int] = None,
    ) -> OrganicScanRecord:
        """
        Factory for records built from already-parsed event fields.

        Empty genus/species have been seen in the wild; they become
        "Unknown". base_value comes from the host's value table and is
        routed to estimated or potential value by scan stage.
        """
        genus = genus or UNKNOWN_ORGANISM
        species = species or UNKNOWN_ORGANISM
        analysed = scan_type is ScanType.ANALYSE

        return OrganicScanRecord(
            genus=genus,
            species=species,
            scan_type=scan_type,
            timestamp=timestamp,
            variant=variant or None,
            genus_localised=genus_localised or genus,
            species_localised=species_localised or species,
            variant_localised=variant_localised or None,
            estimated_value=base_value if analysed else None,
            potential_estimated_value=None if analysed else base_value,
            system_address=system_address,
            body_id=body_id
        )

    @property
    def key(self) -> OrganismKey:
        return (self.genus, self.species, self.variant or "")

    @property
    def species_localised_short(self) -> str:
        """Species text without its leading genus name."""
        species = self.species_localised or self.species
        return _strip_prefix(species, (self.genus_localised or self.genus) + " ")

    @property
    def variant_localised_short(self) -> str:
        """Variant text without its leading species name, or ''."""
        variant = self.variant_localised or self.variant
        if not variant:
            return ""
        return _strip_prefix(variant, (self.species_localised or self.species) + " -").strip()
