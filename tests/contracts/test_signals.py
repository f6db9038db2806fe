"""
Signal Record Contract Tests

INVARIANTS TESTED:
1. Carrier records always carry the 10-day horizon
2. is_same ignores expiry for carriers only
3. Absent optional fields compare equal
4. Factory fallbacks for localisation and "no faction"
5. Malformed records are rejected at construction
"""

import pytest

from journalcore.contracts.base import ContractViolation, ErrorCode
from journalcore.contracts.signals import (
    CARRIER_EXPIRY_SECONDS, SignalCategory, SignalRecord,
    check_localisation, count_by_category
)

from tests.fixtures import make_carrier, make_signal, ts


class TestCarrierHorizon:

    def test_carrier_time_remaining_is_forced(self):
        carrier = make_carrier(time_remaining=500)
        assert carrier.time_remaining_seconds == CARRIER_EXPIRY_SECONDS
        assert carrier.expires_at == ts(CARRIER_EXPIRY_SECONDS)

    def test_carrier_without_time_remaining_still_expires(self):
        carrier = make_carrier(time_remaining=None)
        assert carrier.expires_at is not None

    def test_non_carrier_keeps_reported_time(self):
        uss = make_signal(time_remaining=600)
        assert uss.time_remaining_seconds == 600
        assert uss.expires_at == ts(600)

    def test_no_expiry_when_time_remaining_absent(self):
        assert make_signal(time_remaining=None).expires_at is None


class TestIsSame:

    def test_carriers_with_different_countdowns_are_same(self):
        first = make_carrier(at=0, time_remaining=500)
        second = make_carrier(at=3600, time_remaining=900)
        assert first.is_same(second)
        assert second.is_same(first)

    def test_uss_with_different_expiry_are_distinct(self):
        first = make_signal(name="USS-1", time_remaining=600)
        second = make_signal(name="USS-1", time_remaining=900)
        assert not first.is_same(second)

    def test_uss_with_equal_expiry_from_different_reports_are_same(self):
        # seen at t=0 with 900s left, again at t=300 with 600s left
        first = make_signal(name="USS-1", at=0, time_remaining=900)
        second = make_signal(name="USS-1", at=300, time_remaining=600)
        assert first.is_same(second)

    def test_absent_fields_compare_equal(self):
        assert make_signal(name="Beacon").is_same(make_signal(name="Beacon", at=50))

    @pytest.mark.parametrize("field,value", [
        ("faction", "$faction_Federation;"),
        ("state", "$FactionState_Boom_desc;"),
        ("uss_type", "$USS_Type_Aftermath;"),
        ("threat_level", 2),
    ])
    def test_identity_fields_distinguish(self, field, value):
        base = make_signal(name="USS-1")
        other = make_signal(name="USS-1", **{field: value})
        assert not base.is_same(other)

    def test_name_distinguishes_carriers(self):
        assert not make_carrier("Carrier-1").is_same(make_carrier("Carrier-2"))


class TestFactory:

    def test_localised_name_falls_back_to_name(self):
        record = SignalRecord.create(name="Jameson Memorial", recorded_at=ts(), localised_name="")
        assert record.localised_name == "Jameson Memorial"

    def test_faction_none_is_dropped(self):
        record = SignalRecord.create(
            name="$USS;",
            recorded_at=ts(),
            signal_type="USS",
            faction="$faction_None;",
            faction_localised="None"
        )
        assert record.faction is None
        assert record.faction_localised is None

    def test_untranslated_localisation_falls_back(self):
        record = SignalRecord.create(
            name="$USS;",
            recorded_at=ts(),
            signal_type="USS",
            uss_type="$USS_Type_Salvage;",
            uss_type_localised="$USS_Type_Salvage;",
            state="$FactionState_None;"
        )
        assert record.uss_type_localised == "$USS_Type_Salvage;"
        assert record.state_localised == "$FactionState_None;"

    def test_empty_strings_become_absent(self):
        record = SignalRecord.create(name="Beacon", recorded_at=ts(), faction="", state="", uss_type="")
        assert record.faction is None
        assert record.state is None
        assert record.uss_type is None

    def test_injected_classifier_is_used(self):
        calls = []

        def classifier(name, signal_type, is_station, localised):
            calls.append((name, signal_type, is_station, localised))
            return SignalCategory.MEGASHIP

        record = SignalRecord.create(
            name="Hercules class", recorded_at=ts(), is_station=True, classifier=classifier
        )
        assert record.category is SignalCategory.MEGASHIP
        assert calls == [("Hercules class", None, True, None)]

    def test_factory_applies_carrier_horizon(self):
        record = SignalRecord.create(
            name="THE GOOD SHIP X7Z-4KQ",
            recorded_at=ts(),
            signal_type="FleetCarrier",
            time_remaining_seconds=12
        )
        assert record.category is SignalCategory.CARRIER
        assert record.time_remaining_seconds == CARRIER_EXPIRY_SECONDS


class TestValidation:

    def test_empty_name_rejected(self):
        with pytest.raises(ContractViolation) as info:
            make_signal(name="")
        assert info.value.code is ErrorCode.INVALID_RECORD

    def test_non_timestamp_rejected(self):
        with pytest.raises(ContractViolation):
            SignalRecord(name="X", localised_name="X", category=SignalCategory.OTHER, recorded_at="now")


def test_check_localisation():
    assert check_localisation("Salvage", "$USS_Type_Salvage;") == "Salvage"
    assert check_localisation("", "raw") == "raw"
    assert check_localisation(None, None) is None
    assert check_localisation("$x;", "raw") == "raw"


def test_is_expired():
    record = make_signal(time_remaining=60)
    assert not record.is_expired(ts(59))
    assert record.is_expired(ts(60))
    assert not make_signal().is_expired(ts(10 ** 6))


def test_count_by_category():
    counts = count_by_category([make_carrier(), make_signal(), make_signal(name="b")])
    assert counts[SignalCategory.CARRIER] == 1
    assert counts[SignalCategory.USS] == 2
    assert counts[SignalCategory.STATION] == 0
