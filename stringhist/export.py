"""Tabular export of normalised histograms and run reports."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Optional, Union

import stringhist

from .config import ConfigurationError, RunConfig
from .driver import SubrunResult
from .histogram import Histogram
from .provenance import build_provenance, stable_json_dumps

REPORT_KIND = "stringhist.run_report.v1"

_EXTENSIONS = {
    "csv": ".csv",
    "tsv": ".tsv",
    "parquet": ".parquet",
}


def _require_pyarrow():
    try:
        import pyarrow as pa  # type: ignore
        import pyarrow.parquet as pq  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("Parquet export requires 'pyarrow'. Install stringhist[parquet].") from e
    return pa, pq


def detect_format(filepath: Union[str, Path]) -> str:
    ext = Path(filepath).suffix.lower()
    ext_map = {
        ".csv": "csv",
        ".tsv": "tsv",
        ".tab": "tsv",
        ".parquet": "parquet",
        ".pq": "parquet",
    }
    fmt = ext_map.get(ext)
    if fmt is None:
        raise ConfigurationError(f"Unknown table extension '{ext}' in {filepath}")
    return fmt


def write_table(hist: Histogram, path: Union[str, Path], fmt: Optional[str] = None) -> Path:
    """Write ``(bin_center, value)`` rows of ``hist`` to ``path``."""
    p = Path(path)
    if fmt is None:
        fmt = detect_format(p)
    if fmt not in _EXTENSIONS:
        raise ConfigurationError(f"Unknown table format: {fmt}")

    if fmt == "parquet":
        pa, pq = _require_pyarrow()
        rows = list(hist.rows())
        table = pa.table(
            {
                "bin_center": pa.array([r[0] for r in rows], type=pa.float64()),
                "value": pa.array([r[1] for r in rows], type=pa.float64()),
            }
        )
        table = table.replace_schema_metadata(
            {
                "stringhist.name": hist.name,
                "stringhist.title": hist.title,
                "stringhist.state": hist.state.value,
            }
        )
        pq.write_table(table, str(p))
        return p

    with open(p, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, delimiter="\t" if fmt == "tsv" else ",")
        writer.writerow(["bin_center", "value"])
        for center, value in hist.rows():
            writer.writerow([repr(center), repr(value)])
    return p


def write_results(results: Iterable[SubrunResult], out_dir: Union[str, Path], fmt: str = "csv") -> list[Path]:
    """One table per histogram per subrun, plus a species summary per subrun."""
    if fmt not in _EXTENSIONS:
        raise ConfigurationError(f"Unknown table format: {fmt}")
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    written = []
    for res in results:
        for h in res.hists:
            written.append(write_table(h, out / f"{res.label}_{h.name}{_EXTENSIONS[fmt]}", fmt))
        species = out / f"{res.label}_species.json"
        species.write_text(stable_json_dumps(res.hists.species.to_dict()) + "\n", encoding="utf-8")
        written.append(species)
    return written


def build_report(
    results: Iterable[SubrunResult],
    config: RunConfig,
    *,
    source: str,
    argv: Optional[list[str]] = None,
) -> dict:
    prov = build_provenance(
        tool="stringhist",
        tool_version=stringhist.__version__,
        settings_path=config.settings_path,
        source=source,
        argv=argv or [],
    )
    return {
        "kind": REPORT_KIND,
        "config": {
            "cme": config.cme,
            "quark_id": config.quark_id,
            "massless_quarks": config.massless_quarks,
            "n_events": config.n_events,
            "n_subruns": config.n_subruns,
            "normalize_by": config.normalize_by,
        },
        "subruns": [r.to_dict() for r in results],
        "provenance": prov,
    }


def render_report(report: dict) -> str:
    return stable_json_dumps(report) + "\n"
