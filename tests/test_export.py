import csv
import importlib
import json
from pathlib import Path

import pytest

from stringhist.config import ConfigurationError, RunConfig
from stringhist.driver import run
from stringhist.export import REPORT_KIND, build_report, render_report, write_results, write_table
from stringhist.histogram import Histogram
from stringhist.sources import RecordedEventSource

try:
    importlib.import_module("pyarrow")
    HAS_PYARROW = True
except Exception:
    HAS_PYARROW = False

needs_pyarrow = pytest.mark.skipif(not HAS_PYARROW, reason="pyarrow not installed; parquet export tests skipped")


def _hist():
    h = Histogram.book("dndy", 4, -2.0, 2.0, title="dN/dy")
    for v in (-1.5, 0.2, 0.3, 1.9):
        h.fill(v)
    h.normalize_spectrum(2)
    return h


def test_csv_table_rows(tmp_path: Path):
    p = write_table(_hist(), tmp_path / "dndy.csv")
    with open(p, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["bin_center", "value"]
    assert [(float(a), float(b)) for a, b in rows[1:]] == pytest.approx(
        [(-1.5, 0.5), (-0.5, 0.0), (0.5, 1.0), (1.5, 0.5)]
    )


def test_tsv_table(tmp_path: Path):
    p = write_table(_hist(), tmp_path / "dndy.tsv")
    first = p.read_text(encoding="utf-8").splitlines()[0]
    assert first == "bin_center\tvalue"


def test_unknown_table_format(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        write_table(_hist(), tmp_path / "dndy.xlsx")
    with pytest.raises(ConfigurationError):
        write_results([], tmp_path, fmt="xlsx")


@needs_pyarrow
def test_parquet_table(tmp_path: Path):
    import pyarrow.parquet as pq

    p = write_table(_hist(), tmp_path / "dndy.parquet")
    table = pq.read_table(str(p))
    assert table.column_names == ["bin_center", "value"]
    assert table.column("value").to_pylist() == pytest.approx([0.5, 0.0, 1.0, 0.5])
    assert table.schema.metadata[b"stringhist.state"] == b"spectrum"


def _recorded_results(fixtures_dir: Path):
    cfg = RunConfig.from_settings(fixtures_dir / "strings.cmnd")
    return cfg, run(cfg, RecordedEventSource(fixtures_dir / "string_events.csv"), quiet=True)


def test_write_results_one_file_per_histogram(tmp_path: Path, fixtures_dir: Path):
    cfg, results = _recorded_results(fixtures_dir)
    written = write_results(results, tmp_path / "out")
    names = {p.name for p in written}
    assert "nominal_dndy.csv" in names
    assert "lowStop_z_last.csv" in names
    assert "nominal_species.json" in names
    assert len(written) == 2 * (len(results[0].hists) + 1)
    species = json.loads((tmp_path / "out" / "nominal_species.json").read_text(encoding="utf-8"))
    assert {row["pdg_id"] for row in species["joining"]} == {111, 2212, -211}


def test_run_report(fixtures_dir: Path):
    cfg, results = _recorded_results(fixtures_dir)
    report = build_report(results, cfg, source="string_events.csv", argv=["stringhist", "run"])
    assert report["kind"] == REPORT_KIND
    assert report["config"]["n_subruns"] == 2
    assert [s["label"] for s in report["subruns"]] == ["nominal", "lowStop"]
    assert report["subruns"][0]["n_completed"] == 3
    assert report["provenance"]["settings"]["sha256"]
    assert json.loads(render_report(report))["kind"] == REPORT_KIND
