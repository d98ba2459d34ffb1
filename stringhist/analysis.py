"""Per-event classification folded into a per-subrun histogram set."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .gaps import GapKind, classify_gaps
from .histogram import INTEGRAL, Histogram, HistogramSpec
from .models import Event
from .primaries import DEFAULT_CODES, StatusCodes, extract_primaries
from .tracker import MAX_RANK, MomentumFractionTracker, ZCategory

_ORDINALS = {1: "1st", 2: "2nd", 3: "3rd"}


def _ordinal(k: int) -> str:
    return _ORDINALS.get(k, f"{k}th")


def standard_specs() -> list[HistogramSpec]:
    specs = [
        HistogramSpec("dndy", 100, -10.0, 10.0, title="Rapidity distribution dN/dy of primary hadrons"),
        HistogramSpec(
            "dptdy", 100, -10.0, 10.0, weighted=True,
            title="Distribution of total transverse momentum over rapidity dpT/dy",
        ),
        HistogramSpec("z", 100, 0.0, 1.0, title="z+ distribution of primary hadrons"),
    ]
    for k in range(1, MAX_RANK + 1):
        specs.append(
            HistogramSpec(f"z{k}", 100, 0.0, 1.0, title=f"z+ distribution of {_ordinal(k)}-rank primary hadron")
        )
    specs += [
        HistogramSpec("z_last", 100, 0.0, 1.0, title="z+ distribution of last-rank primary hadron"),
        HistogramSpec("z_mid", 100, 0.0, 1.0, title="z+ distribution of mid-rank primary hadrons"),
        HistogramSpec("z_joining", 100, 0.0, 1.0, title="z+ distribution of joining-step hadrons"),
        HistogramSpec(
            "dy_regular", 100, -5.0, 5.0, normalization=INTEGRAL,
            title="Rapidity spacing of adjacent hadrons, regular steps",
        ),
        HistogramSpec(
            "dy_joining", 100, -5.0, 5.0, normalization=INTEGRAL,
            title="Rapidity spacing of adjacent hadrons, joining step",
        ),
        HistogramSpec("mass_regular", 100, 0.0, 5.0, title="Mass of regular-step primary hadrons"),
        HistogramSpec("mass_joining", 100, 0.0, 5.0, title="Mass of joining-step primary hadrons"),
    ]
    return specs


@dataclass
class SpeciesTally:
    """Species counts of primary hadrons, split by production step."""

    regular: Counter = field(default_factory=Counter)
    joining: Counter = field(default_factory=Counter)

    def add(self, pdg_id: int, is_joining: bool) -> None:
        (self.joining if is_joining else self.regular)[pdg_id] += 1

    def merge(self, other: "SpeciesTally") -> None:
        self.regular.update(other.regular)
        self.joining.update(other.joining)

    @staticmethod
    def _ratios(counts: Counter) -> dict[int, float]:
        total = sum(counts.values())
        if total == 0:
            return {}
        return {pid: n / total for pid, n in sorted(counts.items(), key=lambda x: -x[1])}

    def ratios(self) -> dict[str, dict[int, float]]:
        return {"regular": self._ratios(self.regular), "joining": self._ratios(self.joining)}

    def to_dict(self) -> dict:
        from .pdg import name as pdg_name

        out = {}
        for step, counts in (("regular", self.regular), ("joining", self.joining)):
            ratios = self._ratios(counts)
            out[step] = [
                {"pdg_id": pid, "name": pdg_name(pid), "count": counts[pid], "ratio": r}
                for pid, r in ratios.items()
            ]
        return out


class HistogramSet:
    def __init__(self, specs: Optional[list[HistogramSpec]] = None):
        self._hists: dict[str, Histogram] = {}
        for spec in specs if specs is not None else standard_specs():
            if spec.name in self._hists:
                raise ValueError(f"Duplicate histogram name: {spec.name}")
            self._hists[spec.name] = Histogram(spec)
        self.species = SpeciesTally()
        self.n_events = 0
        self.normalized_with: Optional[int] = None

    @classmethod
    def book(cls) -> "HistogramSet":
        return cls(standard_specs())

    def __getitem__(self, key: str) -> Histogram:
        return self._hists[key]

    def __contains__(self, key: str) -> bool:
        return key in self._hists

    def __iter__(self) -> Iterator[Histogram]:
        return iter(self._hists.values())

    def __len__(self) -> int:
        return len(self._hists)

    def keys(self) -> list[str]:
        return list(self._hists)

    def fill(self, key: str, value: float, weight: Optional[float] = None) -> None:
        self._hists[key].fill(value, weight)

    def merge(self, other: "HistogramSet") -> None:
        if self.keys() != other.keys():
            raise ValueError("Cannot merge histogram sets with different bookings")
        for key, h in self._hists.items():
            h.merge(other[key])
        self.species.merge(other.species)
        self.n_events += other.n_events

    def normalize(self, n_events: int) -> None:
        for h in self._hists.values():
            h.normalize(n_events)
        self.normalized_with = n_events


def analyse_event(
    event: Event,
    hists: HistogramSet,
    total_energy: float,
    codes: StatusCodes = DEFAULT_CODES,
) -> None:
    """Classify one event and fold it into ``hists``."""
    primaries = extract_primaries(event, codes)

    for h in primaries:
        y = h.rapidity
        hists.fill("dndy", y)
        hists.fill("dptdy", y, h.pt)
        hists.fill("mass_joining" if h.is_joining else "mass_regular", h.mass)
        hists.species.add(h.pdg_id, h.is_joining)

    tracker = MomentumFractionTracker(total_energy)
    for t in tracker.track(primaries):
        hists.fill("z", t.z)
        if t.category is ZCategory.JOINING:
            hists.fill("z_joining", t.z)
        elif t.category is ZCategory.LAST:
            hists.fill("z_last", t.z)
        else:
            if t.is_mid:
                hists.fill("z_mid", t.z)
            if t.rank_slot is not None:
                hists.fill(f"z{t.rank_slot}", t.z)

    for gap in classify_gaps(primaries):
        if gap.kind is GapKind.JOINING:
            hists.fill("dy_joining", gap.delta_y)
        elif gap.kind is GapKind.REGULAR:
            hists.fill("dy_regular", gap.delta_y)

    hists.n_events += 1
