"""Binned, weighted accumulators with one-shot normalisation.

A histogram covers ``[lower, upper)`` with ``n_bins`` equal-width bins and no
underflow/overflow bins: values outside the range (and NaN) are dropped.

After the event loop each histogram is normalised exactly once, either as a
spectrum (``content / (n_events * width)``, e.g. dN/dy per event) or to unit
integral (``content / sum``). The state is tracked by :class:`NormState`; a
second normalisation, or filling a normalised histogram, raises
:class:`NormalizationError`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

import numpy as np

from .config import ConfigurationError

SPECTRUM = "spectrum"
INTEGRAL = "integral"


class NormalizationError(RuntimeError):
    pass


class NormState(Enum):
    RAW = "raw"
    SPECTRUM = SPECTRUM
    INTEGRAL = INTEGRAL


@dataclass(frozen=True)
class HistogramSpec:
    """Booking parameters for a histogram.

    Attributes:
        name: Short key, used in file names.
        n_bins: Number of bins (> 0).
        lower, upper: Domain ``[lower, upper)``.
        weighted: Whether fills carry an explicit weight.
        title: Human-readable name.
        normalization: ``"spectrum"`` or ``"integral"``.
    """

    name: str
    n_bins: int
    lower: float
    upper: float
    weighted: bool = False
    title: str = ""
    normalization: str = SPECTRUM

    def check(self) -> None:
        if int(self.n_bins) != self.n_bins or self.n_bins <= 0:
            raise ConfigurationError(f"{self.name}: number of bins must be a positive integer, got {self.n_bins}")
        if not (math.isfinite(self.lower) and math.isfinite(self.upper)):
            raise ConfigurationError(f"{self.name}: histogram edges must be finite")
        if self.lower >= self.upper:
            raise ConfigurationError(
                f"{self.name}: lower edge {self.lower} must be below upper edge {self.upper}"
            )
        if self.normalization not in (SPECTRUM, INTEGRAL):
            raise ConfigurationError(f"{self.name}: unknown normalization '{self.normalization}'")


class Histogram:
    def __init__(self, spec: HistogramSpec):
        spec.check()
        self.spec = spec
        self._contents = np.zeros(int(spec.n_bins), dtype=float)
        self._state = NormState.RAW
        self.n_fills = 0

    @classmethod
    def book(
        cls,
        name: str,
        n_bins: int,
        lower: float,
        upper: float,
        *,
        weighted: bool = False,
        title: str = "",
        normalization: str = SPECTRUM,
    ) -> "Histogram":
        return cls(HistogramSpec(name, n_bins, lower, upper, weighted, title or name, normalization))

    # --- read-only views ---

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def title(self) -> str:
        return self.spec.title or self.spec.name

    @property
    def n_bins(self) -> int:
        return len(self._contents)

    @property
    def width(self) -> float:
        return (self.spec.upper - self.spec.lower) / self.spec.n_bins

    @property
    def state(self) -> NormState:
        return self._state

    @property
    def edges(self) -> np.ndarray:
        return self.spec.lower + self.width * np.arange(self.n_bins + 1)

    @property
    def centers(self) -> np.ndarray:
        return self.spec.lower + self.width * (np.arange(self.n_bins) + 0.5)

    @property
    def contents(self) -> np.ndarray:
        return self._contents.copy()

    @property
    def total(self) -> float:
        return float(self._contents.sum())

    def rows(self) -> Iterator[tuple[float, float]]:
        """(bin center, value) pairs, lowest bin first."""
        for c, v in zip(self.centers, self._contents):
            yield float(c), float(v)

    # --- filling ---

    def bin_index(self, value: float) -> Optional[int]:
        """Index of the bin holding ``value``, or None if it is out of range."""
        if not (self.spec.lower <= value < self.spec.upper):
            return None
        idx = math.floor((value - self.spec.lower) / self.width)
        if idx < 0 or idx >= self.n_bins:
            return None
        return idx

    def _check_fillable(self, explicit_weight: bool) -> None:
        if self._state is not NormState.RAW:
            raise NormalizationError(f"{self.name}: cannot fill a normalised histogram")
        if explicit_weight and not self.spec.weighted:
            raise ConfigurationError(f"{self.name}: histogram is unweighted")

    def fill(self, value: float, weight: Optional[float] = None) -> None:
        self._check_fillable(weight is not None and weight != 1.0)
        idx = self.bin_index(value)
        if idx is None:
            return
        self._contents[idx] += 1.0 if weight is None else weight
        self.n_fills += 1

    def fill_many(self, values: Iterable[float], weights: Optional[Iterable[float]] = None) -> None:
        v = np.asarray(list(values) if not isinstance(values, np.ndarray) else values, dtype=float)
        if weights is None:
            w = np.ones_like(v)
        else:
            w = np.asarray(list(weights) if not isinstance(weights, np.ndarray) else weights, dtype=float)
            if w.shape != v.shape:
                raise ValueError(f"{self.name}: {len(w)} weights for {len(v)} values")
        self._check_fillable(weights is not None and bool(np.any(w != 1.0)))
        with np.errstate(invalid="ignore"):
            in_range = (v >= self.spec.lower) & (v < self.spec.upper)
        idx = np.floor((v[in_range] - self.spec.lower) / self.width).astype(int)
        keep = (idx >= 0) & (idx < self.n_bins)
        np.add.at(self._contents, idx[keep], w[in_range][keep])
        self.n_fills += int(keep.sum())

    def merge(self, other: "Histogram") -> None:
        """Add another raw histogram with identical binning, bin by bin."""
        if self._state is not NormState.RAW or other.state is not NormState.RAW:
            raise NormalizationError(f"{self.name}: only raw histograms can be merged")
        if (self.spec.n_bins, self.spec.lower, self.spec.upper) != (
            other.spec.n_bins,
            other.spec.lower,
            other.spec.upper,
        ):
            raise ValueError(f"{self.name}: cannot merge histograms with different binning")
        self._contents += other._contents
        self.n_fills += other.n_fills

    # --- normalisation ---

    def _begin_normalization(self) -> None:
        if self._state is not NormState.RAW:
            raise NormalizationError(f"{self.name}: already normalised ({self._state.value})")

    def normalize_spectrum(self, n_events: int) -> None:
        self._begin_normalization()
        if n_events <= 0:
            raise ValueError(f"{self.name}: event count must be positive, got {n_events}")
        self._contents /= n_events * self.width
        self._state = NormState.SPECTRUM

    def normalize_integral(self) -> None:
        self._begin_normalization()
        total = self._contents.sum()
        if total != 0:
            self._contents /= total
        self._state = NormState.INTEGRAL

    def normalize(self, n_events: int) -> None:
        """Apply the normalisation the histogram was booked with."""
        if self.spec.normalization == INTEGRAL:
            self.normalize_integral()
        else:
            self.normalize_spectrum(n_events)

    def __str__(self) -> str:
        lines = [
            f"{self.title}",
            f"  {self.n_bins} bins in [{self.spec.lower:g}, {self.spec.upper:g}), "
            f"{self.n_fills} fills, state={self._state.value}",
        ]
        for center, value in self.rows():
            lines.append(f"  {center:12.4e} {value:12.4e}")
        return "\n".join(lines)
