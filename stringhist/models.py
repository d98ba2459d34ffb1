"""
Core event data model for stringhist.

Events arrive from an event source as an ordered particle list. The order is
the production order along the fragmenting string and is never re-sorted;
everything derived from it (primary hadrons, ranks, rapidity gaps) depends on
that order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Optional

_TINY = 1e-20


@dataclass(frozen=True)
class Particle:
    """A single particle in an event.

    Attributes:
        pdg_id: PDG Monte Carlo particle ID.
        status: Signed status code. Sign and magnitude encode the production
            mechanism (PYTHIA 8 convention: 81-89 for string fragmentation
            hadrons, a dedicated code for joining-step hadrons, negative for
            particles that decayed or fragmented further).
        px, py, pz, energy: Four-momentum components in GeV.
        mass: Rest mass in GeV.
        color1, color2: Color flow tags. Only the seeded string endpoints carry
            non-zero tags.
    """

    pdg_id: int
    status: int
    px: float
    py: float
    pz: float
    energy: float
    mass: float = 0.0
    color1: int = 0
    color2: int = 0

    @property
    def status_abs(self) -> int:
        return abs(self.status)

    @property
    def pt(self) -> float:
        """Transverse momentum."""
        return math.sqrt(self.px**2 + self.py**2)

    @property
    def rapidity(self) -> float:
        """Rapidity along the string (z) axis.

        The transverse mass sqrt(E^2 - pz^2) is floored at ``_TINY``, so a
        record rounded to ``energy < |pz|`` still gives a large finite value.
        """
        mt = math.sqrt(max(self.energy**2 - self.pz**2, 0.0))
        y = math.log(max(self.energy + abs(self.pz), _TINY) / max(mt, _TINY))
        return y if self.pz > 0 else -y

    @property
    def light_cone_plus(self) -> float:
        """Light-cone momentum p+ = E + pz."""
        return self.energy + self.pz

    def to_dict(self) -> dict:
        """Convert to a flat dictionary for tabular formats."""
        return {
            "pdg_id": self.pdg_id,
            "status": self.status,
            "px": self.px,
            "py": self.py,
            "pz": self.pz,
            "energy": self.energy,
            "mass": self.mass,
        }


@dataclass
class Event:
    """A single simulated string-fragmentation event.

    Attributes:
        event_number: Sequential event number within a subrun.
        particles: Particles in generator order.
    """

    event_number: int = 0
    particles: list[Particle] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.particles)

    def __iter__(self):
        return iter(self.particles)

    def __getitem__(self, idx):
        return self.particles[idx]


@dataclass(frozen=True)
class PrimaryHadron:
    """A hadron produced directly by string fragmentation.

    Attributes:
        particle: The underlying particle, unchanged.
        index: Position of the particle in its event's particle list.
        is_joining: True iff the particle was produced at the joining step.
        rank: 1-based rank among non-joining primaries, None for joining
            hadrons and for hadrons that have not been tracked yet.
        momentum_fraction: Light-cone momentum fraction z of what remained of
            the string when the hadron was produced. Not clamped to [0, 1].
    """

    particle: Particle
    index: int
    is_joining: bool
    rank: Optional[int] = None
    momentum_fraction: Optional[float] = None

    @property
    def status(self) -> int:
        return self.particle.status

    @property
    def pdg_id(self) -> int:
        return self.particle.pdg_id

    @property
    def rapidity(self) -> float:
        return self.particle.rapidity

    @property
    def pt(self) -> float:
        return self.particle.pt

    @property
    def mass(self) -> float:
        return self.particle.mass

    @property
    def light_cone_plus(self) -> float:
        return self.particle.light_cone_plus

    def tracked(self, rank: Optional[int], momentum_fraction: float) -> "PrimaryHadron":
        return replace(self, rank=rank, momentum_fraction=momentum_fraction)
