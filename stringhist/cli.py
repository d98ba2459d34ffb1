"""
Command-line interface for stringhist.

Usage:
    stringhist run plots.cmnd --out results/
    stringhist run --source events.csv --events 1000 --cme 500 --print
    stringhist doctor
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import stringhist


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stringhist",
        description="Rapidity, z and mass histograms of primary hadrons "
        "from single-string fragmentation events.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {stringhist.__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- run ---
    run_parser = subparsers.add_parser(
        "run",
        help="Generate or replay events and fill histograms",
        description="Run every configured subrun, fill and normalise histograms, and export them.",
    )
    run_parser.add_argument(
        "settings", nargs="?", default=None,
        help="Settings file (.cmnd layout). Built-in defaults are used if omitted.",
    )
    run_parser.add_argument(
        "--source", default="pythia",
        help="'pythia' to generate with PYTHIA 8, or a CSV/TSV particle table to replay",
    )
    run_parser.add_argument("--events", type=int, default=None, help="Events per subrun")
    run_parser.add_argument("--cme", type=float, default=None, help="String mass in GeV")
    run_parser.add_argument("--quark", type=int, default=None, help="PDG id of the string-end quark")
    run_parser.add_argument(
        "--massless", action="store_const", const=True, default=None,
        help="Seed the string ends with massless quarks",
    )
    run_parser.add_argument(
        "--normalize-by", choices=["configured", "completed"], default=None,
        help="Event count used for spectrum normalisation when a subrun stops early",
    )
    run_parser.add_argument("--out", default=None, help="Directory for histogram tables")
    run_parser.add_argument(
        "--format", dest="table_format", choices=["csv", "tsv", "parquet"], default="csv",
        help="Histogram table format (default: csv)",
    )
    run_parser.add_argument(
        "--report",
        default="auto",
        help=(
            "Run report output. 'auto' writes <out>/stringhist.json when --out is given; "
            "'-' writes the report to stdout; 'none' disables; anything else is a path."
        ),
    )
    run_parser.add_argument(
        "--print", dest="print_hists", action="store_true",
        help="Print normalised histograms to stdout",
    )
    run_parser.add_argument(
        "--quiet", "-q", action="store_true",
        help="Suppress progress output",
    )

    # --- doctor ---
    doctor_parser = subparsers.add_parser(
        "doctor",
        help="Environment & capability check",
    )
    doctor_parser.add_argument("--json", dest="as_json", action="store_true")

    return parser


def _make_source(spec: str):
    from .sources import PythiaSource, RecordedEventSource

    if spec == "pythia":
        return PythiaSource()
    return RecordedEventSource(spec)


def _cmd_run(args: argparse.Namespace, argv: list[str]) -> int:
    from .config import ConfigurationError, RunConfig
    from .driver import run
    from .export import build_report, render_report, write_results

    overrides = {
        "n_events": args.events,
        "cme": args.cme,
        "quark_id": args.quark,
        "massless_quarks": args.massless,
        "normalize_by": args.normalize_by,
    }
    try:
        if args.settings is not None:
            config = RunConfig.from_settings(args.settings, **overrides)
        else:
            config = RunConfig(**{k: v for k, v in overrides.items() if v is not None})
        source = _make_source(args.source)
        results = run(config, source, quiet=args.quiet)
    except (ValueError, FileNotFoundError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.print_hists:
        for res in results:
            print(f"# {res.label}: {res.n_completed}/{res.n_requested} events")
            for h in res.hists:
                print(str(h))

    try:
        if args.out:
            written = write_results(results, args.out, args.table_format)
            if not args.quiet:
                print(f"  Wrote {len(written)} files to {args.out}", file=sys.stderr)
    except (ConfigurationError, ImportError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    report = build_report(results, config, source=args.source, argv=["stringhist"] + argv)
    out_text = render_report(report)
    if args.report == "auto":
        if args.out:
            Path(args.out, "stringhist.json").write_text(out_text, encoding="utf-8")
    elif args.report == "-":
        print(out_text.rstrip("\n"), file=sys.stdout)
    elif args.report in ("none", "off", "false"):
        pass
    else:
        Path(args.report).write_text(out_text, encoding="utf-8")

    return 0


def _cmd_doctor(args: argparse.Namespace) -> int:
    from .doctor import doctor_report

    rep = doctor_report()
    if args.as_json:
        print(json.dumps(rep, indent=2, sort_keys=True))
    else:
        print(rep["summary"])
        for item in rep["checks"]:
            status = "OK" if item["ok"] else "FAIL"
            print(f"- {status}: {item['name']}: {item['detail']}")
    return 0 if all(c["ok"] for c in rep["checks"]) else 2


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return _cmd_run(args, list(argv))
    if args.command == "doctor":
        return _cmd_doctor(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
