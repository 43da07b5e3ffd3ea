# investment_appraisal/scenario_runner.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime
import json
import logging
import os
import warnings

import pandas as pd
import yaml

from .adapters import run_metrics
from .config import DEFAULT_SETTINGS, Settings
from .validate import (
    InvalidInputError,
    load_params_from_file,
    validate_request_dict,
)

logger = logging.getLogger(__name__)

REQUEST_PATTERNS = ("*.yaml", "*.yml", "*.json")


def _env_mode() -> str:
    mode = os.getenv("VALIDATION_MODE", "relaxed").lower()
    return mode if mode in ("strict", "relaxed") else "relaxed"


@dataclass
class RunResult:
    summary: Dict[str, Any]
    summary_path: Path
    results_path: Optional[Path] = None


def _write_jsonl(path: Path, rows: List[Dict[str, Any]]) -> None:
    with path.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row) + "\n")


def _write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    if not rows:
        path.write_text("", encoding="utf-8")
        return
    pd.DataFrame(rows).to_csv(path, index=False)


def _write_rows(out: Path, base: str, rows: List[Dict[str, Any]], fmt: str) -> Path:
    if fmt == "jsonl":
        path = out / f"{base}.jsonl"
        _write_jsonl(path, rows)
    elif fmt == "csv":
        path = out / f"{base}.csv"
        _write_csv(path, rows)
    else:
        raise ValueError(f"unknown fmt: {fmt}")
    return path


def validate_and_run(
    params: Dict[str, Any], *, mode: str = "relaxed", settings: Settings = DEFAULT_SETTINGS
) -> Dict[str, Any]:
    validate_request_dict(params, mode=mode)
    return run_metrics(params, settings)


def run_dir(
    config: str | Path,
    out_dir: str | Path,
    *,
    fmt: str = "jsonl",
    save_annual: bool = False,
    settings: Settings = DEFAULT_SETTINGS,
    mode: Optional[str] = None,
) -> RunResult:
    """
    Evaluate a single request file, or every request file in a directory.

    File mode writes summary.json (and the per-period table when save_annual).
    Directory mode writes one results row per request plus a summary.json with
    counts; a request that fails validation is reported and skipped.
    """
    cfg_path = Path(config)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    mode = mode or _env_mode()
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if cfg_path.is_dir():
        files = sorted(
            {f for pat in REQUEST_PATTERNS for f in cfg_path.glob(pat) if f.is_file()}
        )
        if not files:
            raise ValueError(f"{cfg_path}: no request files found")

        rows: List[Dict[str, Any]] = []
        failures: Dict[str, str] = {}
        for f in files:
            try:
                summary = validate_and_run(load_params_from_file(f), mode=mode, settings=settings)
            except (InvalidInputError, ValueError, yaml.YAMLError) as e:
                warnings.warn(f"{f.name}: {e}")
                failures[f.name] = str(e)
                continue
            summary.pop("annual", None)
            summary.pop("assumptions", None)
            rows.append({"request": f.name, **summary})
            logger.info("%s: irr=%.2f%% npv=%.2f", f.name, summary["irr_pct"], summary["npv"])

        results_path = _write_rows(out, f"{cfg_path.name}_results_{stamp}", rows, fmt)
        summary = {"evaluated": len(rows), "failed": len(failures), "failures": failures}
        summary_path = out / "summary.json"
        summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")
        return RunResult(summary=summary, summary_path=summary_path, results_path=results_path)

    # Single file path
    params = load_params_from_file(cfg_path)
    summary = validate_and_run(params, mode=mode, settings=settings)
    logger.info("%s: irr=%.2f%% npv=%.2f", cfg_path.name, summary["irr_pct"], summary["npv"])

    summary_path = out / "summary.json"
    summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")

    results_path: Optional[Path] = None
    if save_annual:
        results_path = _write_rows(out, f"{cfg_path.stem}_results_{stamp}", summary.get("annual", []), fmt)

    return RunResult(summary=summary, summary_path=summary_path, results_path=results_path)


def load_request(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if p.is_dir():
        raise ValueError(f"{p} is a directory (expected a file)")
    return load_params_from_file(p)
