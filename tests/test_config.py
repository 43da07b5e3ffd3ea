import io
from pathlib import Path

import pytest

from investment_appraisal.config import DEFAULT_SETTINGS, load_settings

EXAMPLE = Path(__file__).resolve().parents[1] / "investment_appraisal" / "inputs" / "settings.example.yaml"


def test_empty_settings_use_defaults():
    assert load_settings(io.StringIO("")) == DEFAULT_SETTINGS


def test_example_file_matches_defaults():
    assert load_settings(EXAMPLE) == DEFAULT_SETTINGS


def test_partial_overrides():
    s = load_settings(io.StringIO(
        "solver:\n"
        "  max_iterations: 25\n"
        "  tolerance: 0.01\n"
        "heuristics:\n"
        "  base_rate: 0.08\n"
        "  rate_bounds: [0.04, 0.20]\n"
        "  inflow_multipliers: {ESG: 0.10, Cost Control: 0.30}\n"
    ))
    assert s.solver.max_iterations == 25
    assert isinstance(s.solver.max_iterations, int)
    assert s.solver.tolerance == 0.01
    assert s.solver.initial_guess == 0.10
    assert s.heuristics.base_rate == 0.08
    assert s.heuristics.rate_bounds == (0.04, 0.20)
    assert [tag for tag, _ in s.heuristics.inflow_multipliers] == ["ESG", "Cost Control"]
    assert s.heuristics.rate_adjustments == DEFAULT_SETTINGS.heuristics.rate_adjustments


def test_settings_from_path(tmp_path):
    f = tmp_path / "settings.yaml"
    f.write_text("solver: {initial_guess: 0.05}\n", encoding="utf-8")
    assert load_settings(f).solver.initial_guess == 0.05
    assert load_settings(str(f)).solver.initial_guess == 0.05


@pytest.mark.parametrize(
    "text",
    [
        "solver: {max_iter: 5}\n",
        "heuristics: {base: 0.1}\n",
        "reporting: {}\n",
        "- just\n- a list\n",
        "solver: [1, 2]\n",
        "solver: {lower_bound: -5.0}\n",
        "solver: {initial_guess: 20.0}\n",
    ],
)
def test_bad_settings_rejected(text):
    with pytest.raises(ValueError):
        load_settings(io.StringIO(text))


def test_settings_are_hashable():
    assert hash(load_settings(EXAMPLE)) == hash(DEFAULT_SETTINGS)


def test_aliases_from_yaml():
    s = load_settings(io.StringIO("heuristics:\n  tag_aliases: {Green: ESG}\n"))
    assert s.heuristics.tag_aliases == (("Green", "ESG"),)
