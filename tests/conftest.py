"""Test fixtures.

Recorded-event tables and settings files are (re)generated at collection
time so the suite does not depend on shipped data files.
"""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from stringhist.models import Event, Particle

PION_MASS = 0.13957


def make_hadron(status: int, y: float, *, pdg_id: int = 211, mass: float = PION_MASS, pt: float = 0.0) -> Particle:
    mt = math.sqrt(mass * mass + pt * pt)
    return Particle(
        pdg_id=pdg_id,
        status=status,
        px=pt,
        py=0.0,
        pz=mt * math.sinh(y),
        energy=mt * math.cosh(y),
        mass=mass,
    )


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _ensure_fixtures(fixtures: Path) -> None:
    # Three recorded events: string ends, string system, primaries in
    # string order, one joining hadron each.
    _write_text(
        fixtures / "string_events.csv",
        """event_number,pdg_id,status,px,py,pz,energy,mass
0,1,-23,0.0,0.0,249.9998,250.0,0.33
0,-1,-23,0.0,0.0,-249.9998,250.0,0.33
0,92,-11,0.0,0.0,0.0,500.0,500.0
0,211,83,0.2,0.1,180.0,180.0002,0.13957
0,-211,83,-0.1,0.3,40.0,40.0015,0.13957
0,111,1216,0.0,-0.2,2.0,2.0151,0.13498
0,211,84,-0.3,0.1,-30.0,30.0020,0.13957
0,-211,84,0.2,-0.3,-200.0,200.0003,0.13957
1,1,-23,0.0,0.0,249.9998,250.0,0.33
1,-1,-23,0.0,0.0,-249.9998,250.0,0.33
1,92,-11,0.0,0.0,0.0,500.0,500.0
1,321,83,0.1,0.0,150.0,150.0008,0.49368
1,-321,83,0.0,0.2,60.0,60.0023,0.49368
1,211,83,0.3,0.0,20.0,20.0028,0.13957
1,2212,1216,-0.2,0.1,1.0,1.3920,0.93827
1,-2212,84,-0.2,-0.3,-269.0,269.0018,0.93827
2,1,-23,0.0,0.0,249.9998,250.0,0.33
2,-1,-23,0.0,0.0,-249.9998,250.0,0.33
2,92,-11,0.0,0.0,0.0,500.0,500.0
2,211,83,0.0,0.1,240.0,240.0001,0.13957
2,-211,1216,0.1,0.0,-240.0,240.0001,0.13957
""",
    )

    _write_text(
        fixtures / "strings.cmnd",
        """! Single-string hadronisation, replayed from a table.
Main:numberOfEvents = 3
Main:numberOfSubruns = 2
Main:stringMass = 500.
Main:quarkId = 1
StringFragmentation:stopMass = 0.8   ! joining threshold

Main:subrun = 1
Main:spareWord1 = nominal
Main:subrun = 2
Main:spareWord1 = lowStop
StringFragmentation:stopMass = 0.4
""",
    )


def pytest_configure(config):  # noqa: D401
    """Ensure fixtures exist before any tests run."""

    root = Path(__file__).resolve().parent
    _ensure_fixtures(root / "fixtures")


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def hadron():
    return make_hadron


@pytest.fixture
def event_of(hadron):
    """Build an event from (status, rapidity) pairs."""

    def _build(pairs, event_number: int = 0) -> Event:
        return Event(event_number=event_number, particles=[hadron(s, y) for s, y in pairs])

    return _build
