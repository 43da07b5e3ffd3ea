# investment_appraisal/cli.py
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import yaml

# Only imports the thin runner; heavy math stays behind scenario_runner
from .config import DEFAULT_SETTINGS, load_settings
from .scenario_runner import _env_mode, run_dir, load_request
from .validate import InvalidInputError, validate_request_dict


def parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="investment_appraisal",
        description="Capital-budgeting metrics (NPV, IRR, payback, ROI) for investment requests",
    )
    p.add_argument(
        "--mode",
        default="metrics",
        choices=["metrics", "sensitivity", "montecarlo"],
        help="Execution mode (default: metrics).",
    )
    p.add_argument(
        "--config",
        required=True,
        help="Path to a single request YAML/JSON, or a directory of requests (metrics mode only).",
    )
    p.add_argument(
        "--settings",
        default=None,
        help="Optional YAML with solver/heuristics overrides.",
    )
    p.add_argument(
        "--outputs-dir",
        default="outputs",
        help="Directory to write result files (default: outputs). Will be created if missing.",
    )
    p.add_argument(
        "--format",
        dest="fmt",
        default="csv",
        choices=["csv", "jsonl"],
        help="Output format for result tables (default: csv).",
    )
    p.add_argument(
        "--save-annual",
        action="store_true",
        help="If set, write per-period rows alongside the summary.",
    )
    p.add_argument("--field", default="annual_cash_inflow", help="Input varied in sensitivity mode.")
    p.add_argument("--span", type=float, default=0.2, help="Relative span of the sensitivity grid.")
    p.add_argument("--steps", type=int, default=5, help="Points in the sensitivity grid.")
    p.add_argument("--iterations", type=int, default=1000, help="Monte Carlo draws.")
    p.add_argument("--seed", type=int, default=None, help="Monte Carlo random seed.")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
    v = p.add_mutually_exclusive_group()
    v.add_argument(
        "--strict",
        action="store_true",
        help="Enable strict validation (unknown keys raise).",
    )
    v.add_argument(
        "--relaxed",
        action="store_true",
        help="Enable relaxed validation (unknown keys ignored).",
    )
    return p.parse_args(argv)


def _apply_validation_mode(ns: argparse.Namespace) -> None:
    # Default: leave env as-is; flags override explicitly.
    if ns.strict:
        os.environ["VALIDATION_MODE"] = "strict"
    elif ns.relaxed:
        os.environ["VALIDATION_MODE"] = "relaxed"


def _run_analysis(ns: argparse.Namespace, cfg_path: Path, outputs_dir: Path, settings) -> int:
    from .adapters import inputs_from_request
    from .sensitivity import run_monte_carlo, sweep, sweep_values

    params = load_request(cfg_path)
    validate_request_dict(params, mode=_env_mode())
    inputs, _ = inputs_from_request(params, settings)
    if ns.mode == "sensitivity":
        base = getattr(inputs, ns.field, None)
        if base is None:
            raise ValueError(f"unknown sensitivity field: {ns.field}")
        df = sweep(inputs, ns.field, sweep_values(base, ns.span, ns.steps), settings.solver)
    else:
        df = run_monte_carlo(inputs, iterations=ns.iterations, seed=ns.seed, settings=settings.solver)
        for k, val in df.attrs.items():
            logging.getLogger(__name__).info("%s: %.4f", k, val)

    out = outputs_dir / f"{cfg_path.stem}_{ns.mode}.{ns.fmt}"
    if ns.fmt == "csv":
        df.to_csv(out, index=False)
    else:
        df.to_json(out, orient="records", lines=True)
    print(f"Wrote {len(df)} rows to {out}")
    return 0


def main(argv: list[str] | None = None) -> int:
    ns = parse_args(argv)
    _apply_validation_mode(ns)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Resolve paths
    outputs_dir = Path(ns.outputs_dir).resolve()
    cfg_path = Path(ns.config).resolve()
    outputs_dir.mkdir(parents=True, exist_ok=True)

    try:
        settings = load_settings(ns.settings) if ns.settings else DEFAULT_SETTINGS
        if ns.mode == "metrics":
            res = run_dir(cfg_path, outputs_dir, fmt=ns.fmt, save_annual=ns.save_annual, settings=settings)
            print(f"Wrote {res.summary_path}")
            if res.results_path is not None:
                print(f"Wrote {res.results_path}")
            return 0
        return _run_analysis(ns, cfg_path, outputs_dir, settings)
    except InvalidInputError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except (ValueError, OSError, yaml.YAMLError) as e:
        # Fail noisily with non-zero
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


__all__ = ["main", "parse_args"]
