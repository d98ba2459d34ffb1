"""Event sources.

The run driver talks to an event generator only through :class:`EventSource`:
apply settings, initialise, produce the next event from a seeded string, and
look up rest masses. Three sources are provided:

- :class:`PythiaSource` drives PYTHIA 8 through the ``pythia8mc`` bindings.
- :class:`RecordedEventSource` replays events stored as a CSV/TSV particle
  table (one row per particle, grouped by ``event_number``).
- :class:`CallableSource` wraps a plain callable, for synthetic studies.
"""

from __future__ import annotations

import csv
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Generator, Mapping, Optional, Sequence, Union

from .config import ConfigurationError
from .models import Event, Particle
from .pdg import mass_gev

TABLE_FIELDS = [
    "event_number",
    "pdg_id",
    "status",
    "px",
    "py",
    "pz",
    "energy",
    "mass",
]


class EventSource(ABC):
    def configure(self, settings: Mapping[str, str]) -> None:
        """Apply generator settings. Sources without settings ignore them."""

    def initialize(self) -> bool:
        return True

    @abstractmethod
    def next_event(self, seed: Sequence[Particle]) -> Optional[Event]:
        """Produce the next event from the seeded partons, or None on failure."""
        ...

    def rest_mass(self, pdg_id: int) -> float:
        m = mass_gev(pdg_id)
        if m is None:
            raise ValueError(f"No rest mass known for PDG id {pdg_id}")
        return m

    def stat(self) -> None:
        """Print generator statistics, if the source keeps any."""

    def close(self) -> None:
        """Release anything held open since :meth:`initialize`."""


def _require_pythia():
    try:
        import pythia8mc  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("PYTHIA support requires 'pythia8mc'. Install stringhist[pythia].") from e
    return pythia8mc


class PythiaSource(EventSource):
    """PYTHIA 8 with the hard process switched off, fed one string per event."""

    def __init__(self, pythia=None):
        if pythia is None:
            pythia8mc = _require_pythia()
            pythia = pythia8mc.Pythia()
        self.pythia = pythia
        self._event_number = 0

    def configure(self, settings: Mapping[str, str]) -> None:
        for key, value in settings.items():
            if key.lower().startswith("main:"):
                continue
            if not self.pythia.readString(f"{key} = {value}"):
                raise ConfigurationError(f"PYTHIA rejected setting '{key} = {value}'")

    def initialize(self) -> bool:
        self._event_number = 0
        return bool(self.pythia.init())

    def next_event(self, seed: Sequence[Particle]) -> Optional[Event]:
        record = self.pythia.event
        record.reset()
        for p in seed:
            record.append(p.pdg_id, p.status, p.color1, p.color2, p.px, p.py, p.pz, p.energy, p.mass)
        if not self.pythia.next():
            return None
        particles = []
        for i in range(record.size()):
            q = record[i]
            particles.append(
                Particle(
                    pdg_id=int(q.id()),
                    status=int(q.status()),
                    px=float(q.px()),
                    py=float(q.py()),
                    pz=float(q.pz()),
                    energy=float(q.e()),
                    mass=float(q.m()),
                    color1=int(q.col()),
                    color2=int(q.acol()),
                )
            )
        ev = Event(event_number=self._event_number, particles=particles)
        self._event_number += 1
        return ev

    def rest_mass(self, pdg_id: int) -> float:
        return float(self.pythia.particleData.m0(pdg_id))

    def stat(self) -> None:
        self.pythia.stat()


def _delimiter_for(path: Path) -> str:
    return "\t" if path.suffix.lower() in (".tsv", ".tab") else ","


def iter_table(path: Union[str, Path], delimiter: Optional[str] = None) -> Generator[Event, None, None]:
    """Stream events from a particle table, preserving row order."""
    p = Path(path)
    delim = delimiter or _delimiter_for(p)
    with open(p, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f, delimiter=delim)
        current_evt = None
        particles: list[Particle] = []
        for row in reader:
            evt_no = int(row.get("event_number", "0") or "0")
            if current_evt is None:
                current_evt = evt_no
            if evt_no != current_evt:
                yield Event(event_number=current_evt, particles=particles)
                current_evt = evt_no
                particles = []
            particles.append(
                Particle(
                    pdg_id=int(row["pdg_id"]),
                    status=int(row["status"]),
                    px=float(row.get("px", "0") or "0"),
                    py=float(row.get("py", "0") or "0"),
                    pz=float(row["pz"]),
                    energy=float(row.get("energy", row.get("E", "0")) or "0"),
                    mass=float(row.get("mass", row.get("m", "0")) or "0"),
                )
            )
        if current_evt is not None:
            yield Event(event_number=current_evt, particles=particles)


def write_events(path: Union[str, Path], events, delimiter: Optional[str] = None) -> int:
    """Write events as a particle table; returns the number of events written."""
    p = Path(path)
    delim = delimiter or _delimiter_for(p)
    n = 0
    with open(p, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=TABLE_FIELDS, delimiter=delim)
        writer.writeheader()
        for ev in events:
            for part in ev.particles:
                writer.writerow({"event_number": ev.event_number, **part.to_dict()})
            n += 1
    return n


class RecordedEventSource(EventSource):
    """Replays recorded events; the seed is ignored.

    Running out of recorded events counts as a generation failure.
    """

    def __init__(self, path: Union[str, Path], delimiter: Optional[str] = None):
        self.path = Path(path)
        self.delimiter = delimiter
        self._events: Optional[Generator[Event, None, None]] = None

    def initialize(self) -> bool:
        self.close()
        if not self.path.is_file():
            return False
        self._events = iter_table(self.path, self.delimiter)
        return True

    def close(self) -> None:
        if self._events is not None:
            self._events.close()
            self._events = None

    def next_event(self, seed: Sequence[Particle]) -> Optional[Event]:
        if self._events is None:
            raise RuntimeError("RecordedEventSource used before initialize()")
        return next(self._events, None)


class CallableSource(EventSource):
    def __init__(self, fn: Callable[[Sequence[Particle]], Optional[Event]], rest_mass: Optional[Callable[[int], float]] = None):
        self.fn = fn
        self._rest_mass = rest_mass

    def next_event(self, seed: Sequence[Particle]) -> Optional[Event]:
        return self.fn(seed)

    def rest_mass(self, pdg_id: int) -> float:
        if self._rest_mass is not None:
            return self._rest_mass(pdg_id)
        return super().rest_mass(pdg_id)
