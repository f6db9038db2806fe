"""
Property Tests for Aggregation Invariants

P1: materialize() never holds two records where one is_same the other
P2: bucketed materialization equals the linear scan
P3: every record appended is represented by some materialized record
P4: reducer output has at most one unfinished entry and unique keys
P5: identifier generation rises by exactly one per accepted put
"""

from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from journalcore.aggregation import (
    IdentifierCache, OrganicScanReducer, SignalAggregator,
    materialize_batches, materialize_bucketed
)
from journalcore.contracts.organics import ScanType
from journalcore.contracts.signals import SignalCategory

from tests.fixtures import make_scan, make_signal


# =============================================================================
# STRATEGIES (Generators)
# =============================================================================

@composite
def signal_records(draw):
    """Small value pools so duplicates are common."""
    category = draw(st.sampled_from([SignalCategory.CARRIER, SignalCategory.USS, SignalCategory.OTHER]))
    return make_signal(
        name=draw(st.sampled_from(["A", "B", "C"])),
        category=category,
        at=draw(st.integers(min_value=0, max_value=5)) * 60,
        time_remaining=draw(st.one_of(st.none(), st.sampled_from([60.0, 120.0, 300.0]))),
        faction=draw(st.sampled_from([None, "$faction_Empire;"])),
        threat_level=draw(st.sampled_from([None, 1, 2])),
    )


signal_batches = st.lists(
    st.lists(signal_records(), min_size=1, max_size=4).map(tuple),
    max_size=8
)


@composite
def organic_scans(draw):
    return make_scan(
        genus=draw(st.sampled_from(["G1", "G2"])),
        species=draw(st.sampled_from(["S1", "S2"])),
        scan_type=draw(st.sampled_from(list(ScanType))),
        at=draw(st.integers(min_value=0, max_value=50)),
    )


# =============================================================================
# SIGNAL PROPERTIES
# =============================================================================

@given(signal_batches)
def test_materialized_has_no_duplicates(batches):
    aggregator = SignalAggregator()
    for batch in batches:
        aggregator.append(batch)
    result = aggregator.materialize()

    for i, kept in enumerate(result):
        for later in result[i + 1:]:
            assert not kept.is_same(later)


@given(signal_batches)
def test_bucketed_equals_linear(batches):
    assert materialize_bucketed(batches) == materialize_batches(batches)


@given(signal_batches)
def test_every_record_is_represented(batches):
    result = materialize_batches(batches)
    for batch in batches:
        for record in batch:
            assert any(kept.is_same(record) for kept in result)


@given(signal_batches)
def test_replay_gives_equal_sequence(batches):
    first, second = SignalAggregator(), SignalAggregator(bucketed=True)
    for batch in batches:
        first.append(batch)
        second.append(batch)
    assert first.materialize() == second.materialize()


# =============================================================================
# ORGANIC PROPERTIES
# =============================================================================

@given(st.lists(organic_scans(), max_size=12))
def test_reducer_keys_unique_and_one_open_sequence(records):
    result = OrganicScanReducer.reduce(records)
    keys = [p.key for p in result]
    assert len(keys) == len(set(keys))

    unfinished = [p for p in result if p.record.scan_type is not ScanType.ANALYSE]
    assert len(unfinished) <= 1
    assert all(p.label in ("1", "2", "2+", "3") for p in result)


@given(st.lists(organic_scans(), max_size=12))
def test_reducer_ignores_input_order_for_distinct_times(records):
    # equal timestamps resolve by input order, so compare only distinct times
    distinct = list({r.timestamp.value: r for r in records}.values())
    assert OrganicScanReducer.reduce(distinct) == OrganicScanReducer.reduce(list(reversed(distinct)))


# =============================================================================
# IDENTIFIER PROPERTIES
# =============================================================================

@given(st.lists(st.tuples(st.sampled_from(["$a;", "$b;", "X"]), st.sampled_from(["A", "B", "X"]))))
def test_generation_increments_once_per_accepted_put(puts):
    cache = IdentifierCache()
    for raw_id, text in puts:
        before = cache.generation
        accepted = cache.put(raw_id, text)
        assert cache.generation == before + (1 if accepted else 0)
        assert accepted == (raw_id != text)
