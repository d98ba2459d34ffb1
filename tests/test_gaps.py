import pytest

from stringhist.gaps import GapKind, classify_gaps
from stringhist.primaries import extract_primaries


def _kinds(gaps):
    return [g.kind for g in gaps]


def test_endpoint_gaps_are_dropped(event_of):
    prims = extract_primaries(event_of([(83, 4.0), (83, 2.0), (83, 0.5), (84, -1.0), (84, -3.0)]))
    gaps = list(classify_gaps(prims))
    assert _kinds(gaps) == [GapKind.EDGE, GapKind.REGULAR, GapKind.REGULAR, GapKind.EDGE]
    assert [g.index for g in gaps] == [0, 1, 2, 3]


def test_four_hadrons_leave_one_regular_gap(event_of):
    prims = extract_primaries(event_of([(83, 3.0), (83, 1.0), (84, -1.0), (84, -3.0)]))
    regular = [g for g in classify_gaps(prims) if g.kind is GapKind.REGULAR]
    assert len(regular) == 1
    assert regular[0].index == 1


def test_gaps_next_to_joining_hadron_are_joining(event_of):
    prims = extract_primaries(event_of([(83, 4.0), (83, 2.0), (1216, 0.5), (84, -1.0), (84, -3.0)]))
    assert _kinds(classify_gaps(prims)) == [GapKind.EDGE, GapKind.JOINING, GapKind.JOINING, GapKind.EDGE]


def test_joining_wins_over_endpoint_position(event_of):
    prims = extract_primaries(event_of([(83, 1.0), (1216, 0.0), (84, -1.0)]))
    assert _kinds(classify_gaps(prims)) == [GapKind.JOINING, GapKind.JOINING]


def test_delta_y_is_signed_in_production_order(event_of):
    prims = extract_primaries(event_of([(83, 3.0), (83, 1.0), (83, 1.5), (84, -2.0)]))
    gaps = list(classify_gaps(prims))
    assert [g.delta_y for g in gaps] == pytest.approx([2.0, -0.5, 3.5])
    assert gaps[1].kind is GapKind.REGULAR


def test_short_sequences_have_no_or_only_edge_gaps(event_of):
    assert list(classify_gaps([])) == []
    assert list(classify_gaps(extract_primaries(event_of([(83, 0.0)])))) == []
    two = list(classify_gaps(extract_primaries(event_of([(83, 1.0), (84, -1.0)]))))
    assert _kinds(two) == [GapKind.EDGE]
