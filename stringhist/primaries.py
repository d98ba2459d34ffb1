"""Primary-hadron extraction.

A primary hadron is produced directly by string fragmentation. With PYTHIA 8
status codes these are the hadrons with ``80 < |status| < 90`` plus the
hadrons of the final joining step, which carry a dedicated status code.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import Event, PrimaryHadron


@dataclass(frozen=True)
class StatusCodes:
    """Status codes that identify primary hadrons.

    Attributes:
        joining: Exact status of joining-step hadrons.
        ordinary_low, ordinary_high: Exclusive bounds on ``|status|`` for
            hadrons from ordinary fragmentation steps.
    """

    joining: int = 1216
    ordinary_low: int = 80
    ordinary_high: int = 90

    def is_joining(self, status: int) -> bool:
        return status == self.joining

    def is_primary(self, status: int) -> bool:
        return self.is_joining(status) or self.ordinary_low < abs(status) < self.ordinary_high


DEFAULT_CODES = StatusCodes()


def extract_primaries(event: Event, codes: StatusCodes = DEFAULT_CODES) -> list[PrimaryHadron]:
    """Primary hadrons of ``event`` in generator order."""
    return [
        PrimaryHadron(particle=p, index=i, is_joining=codes.is_joining(p.status))
        for i, p in enumerate(event.particles)
        if codes.is_primary(p.status)
    ]
