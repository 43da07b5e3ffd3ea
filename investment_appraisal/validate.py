# investment_appraisal/validate.py
from __future__ import annotations
import math, os, sys, json
from pathlib import Path
from typing import Any, Dict, Iterable, List
import yaml

from .schema import SCHEMA, REQUEST_KEYS
from .types import FinancialInputs


class InvalidInputError(ValueError):
    """Inputs rejected before any cash flow is generated."""

    def __init__(self, errors: List[str], fields: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)
        self.fields = list(fields)


def _mode_from_env_or_flag(flag: str | None) -> str:
    if flag in ("strict", "relaxed"):
        return flag
    env = (os.environ.get("VALIDATION_MODE") or "").lower()
    return env if env in ("strict", "relaxed") else "relaxed"


def _check_bound(name: str, value: Any) -> str | None:
    rule = SCHEMA[name]
    try:
        v = float(value)
    except (TypeError, ValueError):
        return f"{name} must be a number, got {value!r}"
    if not math.isfinite(v):
        return f"{name} must be a finite number, got {value!r}"
    if rule["type"] == "int" and not v.is_integer():
        return f"{name} must be a whole number of periods, got {value!r}"
    lo = rule["min"]
    if rule["exclusive_min"] and v <= lo:
        return f"{name} must be positive, got {value!r}"
    if not rule["exclusive_min"] and v < lo:
        return f"{name} cannot be negative, got {value!r}"
    return None


def _collect(inputs: FinancialInputs) -> List[tuple]:
    problems: List[tuple] = []
    for name in SCHEMA:
        msg = _check_bound(name, getattr(inputs, name))
        if msg:
            problems.append((name, msg))
    for period, spend in sorted((inputs.yearly_breakdown or {}).items()):
        amounts = (float(spend.opex or 0.0), float(spend.capex or 0.0))
        if not all(math.isfinite(a) for a in amounts):
            problems.append(
                ("yearly_breakdown", f"yearly_breakdown[{period}] spend must be a finite number")
            )
        elif min(amounts) < 0:
            problems.append(
                ("yearly_breakdown", f"yearly_breakdown[{period}] spend cannot be negative")
            )
    return problems


def validate_inputs(inputs: FinancialInputs) -> List[str]:
    """All violations as messages, without raising (form-style error list)."""
    return [msg for _, msg in _collect(inputs)]


def check_inputs(inputs: FinancialInputs) -> None:
    problems = _collect(inputs)
    if problems:
        raise InvalidInputError([m for _, m in problems], [f for f, _ in problems])


def validate_request_dict(data: Dict[str, Any], *, mode: str = "relaxed") -> None:
    """
    Minimal guardrails for a submission payload:
      - relaxed: require an investment amount (initial_investment or capex/opex)
      - strict : also reject unknown top-level keys
    """
    if not isinstance(data, dict):
        raise InvalidInputError(["request must be a mapping"], ["<request>"])

    if mode == "strict":
        unknown = sorted(k for k in data.keys() if k not in REQUEST_KEYS)
        if unknown:
            raise InvalidInputError(
                [f"unknown top-level keys (strict mode): {unknown}"], unknown
            )

    if not any(k in data for k in ("initial_investment", "capex", "opex")):
        raise InvalidInputError(
            ["missing investment amount: set initial_investment or capex/opex"],
            ["initial_investment"],
        )

    tags = data.get("business_case_type")
    if tags is not None and not isinstance(tags, (list, tuple)):
        raise InvalidInputError(
            ["business_case_type must be a list of tags"], ["business_case_type"]
        )


def load_params_from_file(path: Path) -> Dict[str, Any]:
    p = Path(path)
    if p.is_dir():
        # scenario_runner handles directories; keep this function file-only
        raise ValueError(f"{p} is a directory (expected a file)")
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text) or {}
    return json.loads(text or "{}")


def _iter_input_files(p: Path) -> Iterable[Path]:
    if p.is_file():
        yield p
    elif p.is_dir():
        for ext in ("*.yaml", "*.yml", "*.json"):
            yield from sorted(p.rglob(ext))


def _main(argv: List[str] | None = None) -> int:
    import argparse
    parser = argparse.ArgumentParser(prog="investment_appraisal.validate", add_help=True)
    parser.add_argument("paths", nargs="+", help="YAML/JSON request files or directories to validate")
    parser.add_argument("--mode", choices=["strict", "relaxed"], default=None, help="validation mode")
    args = parser.parse_args(argv)

    mode = _mode_from_env_or_flag(args.mode)
    had_error = False

    for raw in args.paths:
        target = Path(raw)
        any_seen = False
        for f in _iter_input_files(target):
            if not f.is_file():
                continue
            any_seen = True
            try:
                data = load_params_from_file(f)
                validate_request_dict(data, mode=mode)
                print(f"OK: {f}")
            except InvalidInputError as e:
                print(f"{f}: {e}", file=sys.stderr)
                had_error = True
            except (ValueError, yaml.YAMLError) as e:
                print(f"{f}: ERROR: {e}", file=sys.stderr)
                had_error = True
        if not any_seen:
            print(f"{target}: no YAML/JSON files found", file=sys.stderr)
            had_error = True

    return 1 if had_error else 0


if __name__ == "__main__":
    raise SystemExit(_main())
