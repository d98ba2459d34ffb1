from __future__ import annotations

import importlib
from typing import Any, Dict, List

_REQUIRED = [
    ("numpy", "numpy (histogram storage)"),
    ("particle", "particle (pdg masses and names)"),
]

_OPTIONAL = [
    ("pyarrow", "pyarrow (parquet export)"),
    ("pythia8mc", "pythia8mc (PYTHIA 8 event source)"),
]


def doctor_report() -> Dict[str, Any]:
    checks: List[Dict[str, Any]] = []

    try:
        import stringhist  # noqa: F401
        checks.append({"name": "stringhist import", "ok": True, "detail": "import ok"})
    except Exception as e:
        checks.append({"name": "stringhist import", "ok": False, "detail": str(e)})

    for module, label in _REQUIRED:
        try:
            importlib.import_module(module)
            checks.append({"name": label, "ok": True, "detail": "installed"})
        except Exception as e:
            checks.append({"name": label, "ok": False, "detail": str(e)})

    for module, label in _OPTIONAL:
        try:
            importlib.import_module(module)
            checks.append({"name": label, "ok": True, "detail": "installed"})
        except Exception:
            checks.append({"name": label, "ok": True, "detail": "not installed (optional)"})

    ok_all = all(c["ok"] for c in checks)
    summary = "stringhist doctor: OK" if ok_all else "stringhist doctor: FAIL"

    return {"summary": summary, "checks": checks}
