from stringhist.models import Event
from stringhist.primaries import DEFAULT_CODES, StatusCodes, extract_primaries


def test_extracts_joining_and_ordinary_hadrons_in_order(event_of):
    ev = event_of([(23, 0.0), (23, 0.0), (83, 2.0), (1216, 0.1), (83, -1.0), (91, 0.5)])
    prims = extract_primaries(ev)

    assert len(prims) == 3
    assert [p.index for p in prims] == [2, 3, 4]
    assert [p.is_joining for p in prims] == [False, True, False]
    assert [p.status for p in prims] == [83, 1216, 83]


def test_extraction_is_a_filter_not_a_transformation(event_of):
    ev = event_of([(83, 1.0), (84, -1.0)])
    prims = extract_primaries(ev)
    assert prims[0].particle is ev.particles[0]
    assert prims[1].particle is ev.particles[1]
    assert prims[0].rank is None
    assert prims[0].momentum_fraction is None


def test_ordinary_range_uses_absolute_status_and_is_exclusive(event_of):
    ev = event_of([(-83, 0.0), (80, 0.0), (81, 0.0), (89, 0.0), (90, 0.0), (-1216, 0.0), (1216, 0.0)])
    prims = extract_primaries(ev)
    assert [p.status for p in prims] == [-83, 81, 89, 1216]
    # only the exact joining code counts as joining
    assert [p.is_joining for p in prims] == [False, False, False, True]


def test_empty_and_singleton_events(event_of):
    assert extract_primaries(Event()) == []
    assert extract_primaries(event_of([(1, 0.0), (22, 1.0)])) == []
    assert len(extract_primaries(event_of([(83, 0.0)]))) == 1


def test_custom_status_codes(event_of):
    codes = StatusCodes(joining=87, ordinary_low=80, ordinary_high=85)
    ev = event_of([(83, 0.0), (87, 0.0), (86, 0.0)])
    prims = extract_primaries(ev, codes)
    assert [(p.status, p.is_joining) for p in prims] == [(83, False), (87, True)]
    assert DEFAULT_CODES.joining == 1216
