"""Run configuration.

Settings files use the PYTHIA 8 ``.cmnd`` layout::

    ! string-only hadronisation
    Main:numberOfEvents = 10000
    Main:numberOfSubruns = 2
    StringFragmentation:stopMass = 0.8

    Main:subrun = 1
    Main:spareWord1 = default
    Main:subrun = 2
    Main:spareWord1 = lowStop
    StringFragmentation:stopMass = 0.4

Lines that do not start with a letter are comments, and anything after ``!``
is ignored. Lines before the first ``Main:subrun`` apply to every subrun; a
``Main:subrun = k`` line opens the block for subrun ``k``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union


class ConfigurationError(ValueError):
    pass


DEFAULT_GENERATOR_SETTINGS: dict[str, str] = {
    "ProcessLevel:all": "off",
    "Tune:ee": "1",
    "StringZ:useOldAExtra": "off",
    "HadronLevel:Decay": "off",
    "Next:numberCount": "100000",
    "StringFragmentation:stopMass": "0.8",
}

SUBRUN_KEY = "Main:subrun"
LABEL_KEY = "Main:spareWord1"

NORMALIZE_BY = ("configured", "completed")

_TRUE = {"on", "true", "yes", "1"}
_FALSE = {"off", "false", "no", "0"}


@dataclass
class SettingsFile:
    """Parsed settings: base block plus per-subrun blocks."""

    path: Optional[Path] = None
    base: dict[str, str] = field(default_factory=dict)
    subruns: dict[int, dict[str, str]] = field(default_factory=dict)


def read_settings(path: Union[str, Path]) -> SettingsFile:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read settings file {p}: {e}") from e

    sf = SettingsFile(path=p)
    block = sf.base
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("!", 1)[0].strip()
        if not line or not line[0].isalpha():
            continue
        if "=" not in line:
            raise ConfigurationError(f"{p}:{lineno}: expected 'key = value', got {raw.strip()!r}")
        key, value = (s.strip() for s in line.split("=", 1))
        if key.lower() == SUBRUN_KEY.lower():
            try:
                subrun = int(value)
            except ValueError as e:
                raise ConfigurationError(f"{p}:{lineno}: bad subrun number {value!r}") from e
            block = sf.subruns.setdefault(subrun, {})
            continue
        block[key] = value
    return sf


def _lookup(settings: dict[str, str], key: str) -> Optional[str]:
    want = key.lower()
    for k, v in settings.items():
        if k.lower() == want:
            return v
    return None


def _as_int(settings: dict[str, str], key: str, default: int) -> int:
    raw = _lookup(settings, key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key}: expected an integer, got {raw!r}") from e


def _as_float(settings: dict[str, str], key: str, default: float) -> float:
    raw = _lookup(settings, key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key}: expected a number, got {raw!r}") from e


def _as_bool(settings: dict[str, str], key: str, default: bool) -> bool:
    raw = _lookup(settings, key)
    if raw is None:
        return default
    low = raw.lower()
    if low in _TRUE:
        return True
    if low in _FALSE:
        return False
    raise ConfigurationError(f"{key}: expected on/off, got {raw!r}")


@dataclass
class RunConfig:
    """Everything the run driver needs.

    Attributes:
        cme: Invariant mass of the string (GeV).
        quark_id: PDG id of the quark end (1=d ... 5=b).
        massless_quarks: Seed the endpoints with zero rest mass.
        n_events: Events per subrun.
        n_subruns: Number of subruns; 0 runs once without subrun blocks.
        settings: Generator settings applied to every subrun.
        subrun_settings: Extra settings per subrun number.
        settings_path: File the settings came from, if any.
        normalize_by: ``"configured"`` normalises spectra with ``n_events``
            even when a subrun stops early; ``"completed"`` uses the number
            of events actually analysed.
    """

    cme: float = 500.0
    quark_id: int = 1
    massless_quarks: bool = False
    n_events: int = 1000
    n_subruns: int = 0
    settings: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_GENERATOR_SETTINGS))
    subrun_settings: dict[int, dict[str, str]] = field(default_factory=dict)
    settings_path: Optional[Path] = None
    normalize_by: str = "configured"

    def __post_init__(self) -> None:
        self.check()

    def check(self) -> None:
        if self.cme <= 0:
            raise ConfigurationError(f"String mass must be positive, got {self.cme}")
        if self.n_events < 0:
            raise ConfigurationError(f"Number of events must not be negative, got {self.n_events}")
        if self.n_subruns < 0:
            raise ConfigurationError(f"Number of subruns must not be negative, got {self.n_subruns}")
        if self.normalize_by not in NORMALIZE_BY:
            raise ConfigurationError(
                f"normalize_by must be one of {', '.join(NORMALIZE_BY)}, got {self.normalize_by!r}"
            )

    @classmethod
    def from_settings(cls, path: Union[str, Path], **overrides) -> "RunConfig":
        """Build a config from a settings file; keyword overrides win.

        Overrides set to None are ignored, so CLI defaults can be passed
        straight through.
        """
        sf = read_settings(path)
        settings = dict(DEFAULT_GENERATOR_SETTINGS)
        settings.update(sf.base)
        values = {
            "cme": _as_float(sf.base, "Main:stringMass", 500.0),
            "quark_id": _as_int(sf.base, "Main:quarkId", 1),
            "massless_quarks": _as_bool(sf.base, "Main:masslessQuarks", False),
            "n_events": _as_int(sf.base, "Main:numberOfEvents", 1000),
            "n_subruns": _as_int(sf.base, "Main:numberOfSubruns", 0),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(
            settings=settings,
            subrun_settings=sf.subruns,
            settings_path=sf.path,
            **values,
        )

    def subruns(self) -> list[Optional[int]]:
        """Subrun numbers to process, in order (``[None]`` for a single run)."""
        if self.n_subruns == 0:
            return [None]
        return list(range(1, self.n_subruns + 1))

    def settings_for(self, subrun: Optional[int]) -> dict[str, str]:
        merged = dict(self.settings)
        if subrun is not None:
            merged.update(self.subrun_settings.get(subrun, {}))
        return merged

    def label_for(self, subrun: Optional[int]) -> str:
        label = _lookup(self.settings_for(subrun), LABEL_KEY)
        if label:
            return label
        return "run" if subrun is None else f"subrun{subrun}"
