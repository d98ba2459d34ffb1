"""Fragmentation rank and light-cone momentum fraction.

Primary hadrons are walked in production order. Each takes a fraction

    z = p+ / p+_remaining

of the light-cone momentum left in the string at the point it is produced,
after which its own p+ is removed from the budget. The budget starts at the
string mass for every event. Joining-step hadrons deplete the budget but carry
no rank.

The hadron just before the joining step is classed as last-rank; when there is
no following primary at all the hadron is classed by its rank.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .models import PrimaryHadron

MAX_RANK = 6


class ZCategory(Enum):
    RANKED = "ranked"
    LAST = "last"
    JOINING = "joining"


@dataclass(frozen=True)
class TrackedHadron:
    hadron: PrimaryHadron
    category: ZCategory

    @property
    def rank(self) -> Optional[int]:
        return self.hadron.rank

    @property
    def z(self) -> float:
        return self.hadron.momentum_fraction

    @property
    def is_mid(self) -> bool:
        """Ranked beyond the first and not last."""
        return self.category is ZCategory.RANKED and self.hadron.rank > 1

    @property
    def rank_slot(self) -> Optional[int]:
        """Rank for the per-rank histograms, None beyond ``MAX_RANK``."""
        if self.category is not ZCategory.RANKED or self.hadron.rank > MAX_RANK:
            return None
        return self.hadron.rank


def _fraction(p_plus: float, remaining: float) -> float:
    if remaining != 0:
        return p_plus / remaining
    if p_plus == 0:
        return math.nan
    return math.copysign(math.inf, p_plus) * math.copysign(1.0, remaining)


class MomentumFractionTracker:
    def __init__(self, total_energy: float):
        self.total_energy = total_energy
        self.remaining = total_energy

    def track(self, primaries: Sequence[PrimaryHadron]) -> list[TrackedHadron]:
        self.remaining = self.total_energy
        out: list[TrackedHadron] = []
        rank = 0
        for i, h in enumerate(primaries):
            p_plus = h.light_cone_plus
            z = _fraction(p_plus, self.remaining)
            if h.is_joining:
                out.append(TrackedHadron(h.tracked(None, z), ZCategory.JOINING))
            else:
                rank += 1
                next_is_joining = i + 1 < len(primaries) and primaries[i + 1].is_joining
                category = ZCategory.LAST if next_is_joining else ZCategory.RANKED
                out.append(TrackedHadron(h.tracked(rank, z), category))
            self.remaining -= p_plus
        return out
