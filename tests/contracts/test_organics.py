"""
Organic Scan Record Contract Tests
"""

import pytest

from journalcore.contracts.base import ContractViolation
from journalcore.contracts.organics import OrganicScanRecord, ScanType, UNKNOWN_ORGANISM

from tests.fixtures import make_scan, ts


class TestScanType:

    def test_stages_are_ordered(self):
        assert ScanType.LOG < ScanType.SAMPLE < ScanType.ANALYSE
        assert [t.stage for t in ScanType] == [1, 2, 3]


class TestFactory:

    def test_missing_genus_and_species_become_unknown(self):
        record = OrganicScanRecord.create(genus="", species=None, scan_type=ScanType.LOG, timestamp=ts())
        assert record.genus == UNKNOWN_ORGANISM
        assert record.species == UNKNOWN_ORGANISM
        assert record.genus_localised == UNKNOWN_ORGANISM

    def test_value_goes_to_estimated_on_analyse(self):
        record = make_scan(scan_type=ScanType.ANALYSE, base_value=1_000_000)
        assert record.estimated_value == 1_000_000
        assert record.potential_estimated_value is None

    @pytest.mark.parametrize("scan_type", [ScanType.LOG, ScanType.SAMPLE])
    def test_value_goes_to_potential_before_analyse(self, scan_type):
        record = make_scan(scan_type=scan_type, base_value=1_000_000)
        assert record.estimated_value is None
        assert record.potential_estimated_value == 1_000_000

    def test_key_uses_empty_variant_when_absent(self):
        assert make_scan(genus="G", species="S").key == ("G", "S", "")
        assert make_scan(genus="G", species="S", variant="V").key == ("G", "S", "V")


class TestValidation:

    def test_both_values_rejected(self):
        with pytest.raises(ContractViolation):
            OrganicScanRecord(
                genus="G", species="S", scan_type=ScanType.SAMPLE, timestamp=ts(),
                estimated_value=1, potential_estimated_value=1
            )

    def test_potential_value_on_analyse_rejected(self):
        with pytest.raises(ContractViolation):
            OrganicScanRecord(
                genus="G", species="S", scan_type=ScanType.ANALYSE, timestamp=ts(),
                potential_estimated_value=1
            )

    def test_empty_species_rejected_on_direct_construction(self):
        with pytest.raises(ContractViolation):
            OrganicScanRecord(genus="G", species="", scan_type=ScanType.LOG, timestamp=ts())


class TestShortNames:

    def test_species_short_drops_genus(self):
        record = OrganicScanRecord.create(
            genus="$Codex_Ent_Bacterial_Genus_Name;",
            genus_localised="Bacterium",
            species="$Codex_Ent_Bacterial_01_Name;",
            species_localised="Bacterium Aurasus",
            variant="$Codex_Ent_Bacterial_01_Teal_Name;",
            variant_localised="Bacterium Aurasus - Teal",
            scan_type=ScanType.LOG,
            timestamp=ts()
        )
        assert record.species_localised_short == "Aurasus"
        assert record.variant_localised_short == "Teal"

    def test_variant_short_empty_without_variant(self):
        assert make_scan().variant_localised_short == ""
