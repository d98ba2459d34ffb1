"""Rapidity spacing between adjacent primary hadrons."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence

from .models import PrimaryHadron


class GapKind(Enum):
    REGULAR = "regular"
    JOINING = "joining"
    EDGE = "edge"


@dataclass(frozen=True)
class Gap:
    """Signed rapidity difference ``y[index] - y[index + 1]``."""

    index: int
    delta_y: float
    kind: GapKind


def classify_gaps(primaries: Sequence[PrimaryHadron]) -> Iterator[Gap]:
    """Yield one gap per adjacent pair, in production order.

    A gap touching a joining hadron is a joining gap. Otherwise the first and
    last gaps of the chain are edge gaps, which are not filed anywhere.
    """
    last = len(primaries) - 2
    for i in range(len(primaries) - 1):
        a, b = primaries[i], primaries[i + 1]
        dy = a.rapidity - b.rapidity
        if a.is_joining or b.is_joining:
            kind = GapKind.JOINING
        elif i == 0 or i == last:
            kind = GapKind.EDGE
        else:
            kind = GapKind.REGULAR
        yield Gap(index=i, delta_y=dy, kind=kind)
