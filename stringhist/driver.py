"""Run driver: subruns, event loop, normalisation."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Optional

from .analysis import HistogramSet, analyse_event
from .config import ConfigurationError, RunConfig
from .models import Particle
from .primaries import DEFAULT_CODES, StatusCodes
from .sources import EventSource

STRING_END_STATUS = 23
STRING_COLOR = 101


def string_endpoints(cme: float, quark_id: int, mass: float) -> list[Particle]:
    """Back-to-back colour-connected quark and antiquark along the z axis."""
    ee = cme / 2
    pp = math.sqrt(max(ee * ee - mass * mass, 0.0))
    return [
        Particle(quark_id, STRING_END_STATUS, 0.0, 0.0, pp, ee, mass, color1=STRING_COLOR, color2=0),
        Particle(-quark_id, STRING_END_STATUS, 0.0, 0.0, -pp, ee, mass, color1=0, color2=STRING_COLOR),
    ]


@dataclass
class SubrunResult:
    """Normalised histograms and bookkeeping for one subrun.

    Attributes:
        label: Human-readable subrun name.
        subrun: Subrun number, None for a run without subruns.
        hists: Histogram set, normalised once.
        n_requested: Configured number of events.
        n_completed: Events actually generated and analysed.
        aborted: True if event generation failed before ``n_requested``.
        n_normalization: Event count the spectra were divided by.
    """

    label: str
    subrun: Optional[int]
    hists: HistogramSet
    n_requested: int
    n_completed: int
    aborted: bool
    n_normalization: int

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "subrun": self.subrun,
            "n_requested": self.n_requested,
            "n_completed": self.n_completed,
            "aborted": self.aborted,
            "n_normalization": self.n_normalization,
            "histograms": {
                h.name: {
                    "title": h.title,
                    "n_bins": h.n_bins,
                    "lower": h.spec.lower,
                    "upper": h.spec.upper,
                    "n_fills": h.n_fills,
                    "state": h.state.value,
                    "sum": h.total,
                }
                for h in self.hists
            },
            "species": self.hists.species.to_dict(),
        }


def run_subrun(
    source: EventSource,
    config: RunConfig,
    subrun: Optional[int] = None,
    *,
    codes: StatusCodes = DEFAULT_CODES,
    quiet: bool = False,
) -> SubrunResult:
    label = config.label_for(subrun)
    source.configure(config.settings_for(subrun))
    if not quiet:
        print(
            f"Initialising generator for q-qbar hadronisation, string mass = {config.cme:g} ({label})",
            file=sys.stderr,
        )
    if not source.initialize():
        raise ConfigurationError(f"Event source failed to initialise for {label}")

    hists = HistogramSet.book()
    n_completed = 0
    aborted = False
    try:
        mass = 0.0 if config.massless_quarks else source.rest_mass(config.quark_id)
        for _ in range(config.n_events):
            seed = string_endpoints(config.cme, config.quark_id, mass)
            event = source.next_event(seed)
            if event is None:
                print("Error: Event generation failed.", file=sys.stderr)
                aborted = True
                break
            analyse_event(event, hists, config.cme, codes)
            n_completed += 1
    finally:
        source.close()

    n_norm = config.n_events if config.normalize_by == "configured" else n_completed
    if n_norm > 0:
        hists.normalize(n_norm)
    elif not quiet:
        print(f"  No events to normalise for {label}; histograms left raw", file=sys.stderr)

    if not quiet:
        print(f"  Analysed {n_completed}/{config.n_events} events for {label}", file=sys.stderr)

    return SubrunResult(
        label=label,
        subrun=subrun,
        hists=hists,
        n_requested=config.n_events,
        n_completed=n_completed,
        aborted=aborted,
        n_normalization=n_norm,
    )


def run(
    config: RunConfig,
    source: EventSource,
    *,
    codes: StatusCodes = DEFAULT_CODES,
    quiet: bool = False,
) -> list[SubrunResult]:
    """Run every configured subrun with a fresh histogram set each."""
    results = []
    for subrun in config.subruns():
        results.append(run_subrun(source, config, subrun, codes=codes, quiet=quiet))
        if not quiet:
            source.stat()
    return results
