"""Run provenance for reports: tool version, git state, settings digest."""

from __future__ import annotations

import hashlib
import json
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


def _sha256_settings(path: str | Path | None) -> str:
    if path is None:
        return ""
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


def _git_sha() -> str:
    """Best-effort SHA of the checkout stringhist runs from; empty if none."""
    try:
        out = subprocess.check_output(
            ["git", "rev-parse", "HEAD"],
            cwd=str(Path(__file__).resolve().parent),
            stderr=subprocess.DEVNULL,
        )
    except (OSError, subprocess.CalledProcessError):
        return ""
    return out.decode("utf-8").strip()


def build_provenance(
    *,
    tool: str,
    tool_version: str,
    settings_path: str | Path | None,
    source: str,
    argv: list[str],
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    prov: Dict[str, Any] = {
        "tool": tool,
        "tool_version": tool_version,
        "git_sha": _git_sha(),
        "utc_timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "settings": {
            "path": "" if settings_path is None else str(settings_path),
            "sha256": _sha256_settings(settings_path),
        },
        "source": source,
        "argv": argv,
    }
    if extra:
        prov["extra"] = extra
    return prov


def stable_json_dumps(obj: Any) -> str:
    """Deterministic JSON for hashing / embedding."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
