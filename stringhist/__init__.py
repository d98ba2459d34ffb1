"""stringhist: primary-hadron histograms from single-string fragmentation."""

from __future__ import annotations

__version__ = "0.1.0"

from .models import Event, Particle, PrimaryHadron
from .histogram import Histogram, HistogramSpec, NormState, NormalizationError
from .config import ConfigurationError, RunConfig, read_settings
from .primaries import StatusCodes, extract_primaries
from .tracker import MomentumFractionTracker
from .gaps import classify_gaps
from .analysis import HistogramSet, analyse_event
from .driver import SubrunResult, run, run_subrun

__all__ = [
    "__version__",
    "Event",
    "Particle",
    "PrimaryHadron",
    "Histogram",
    "HistogramSpec",
    "NormState",
    "NormalizationError",
    "ConfigurationError",
    "RunConfig",
    "read_settings",
    "StatusCodes",
    "extract_primaries",
    "MomentumFractionTracker",
    "classify_gaps",
    "HistogramSet",
    "analyse_event",
    "SubrunResult",
    "run",
    "run_subrun",
]
