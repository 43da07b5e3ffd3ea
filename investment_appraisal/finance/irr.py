# investment_appraisal/finance/irr.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

CONVERGED = "converged"
FLAT_DERIVATIVE = "flat_derivative"
OUT_OF_BOUNDS = "out_of_bounds"
MAX_ITERATIONS = "max_iterations"


class UndefinedRateError(ValueError):
    """Discount rate at or below -100%: the discount factor is undefined."""


@dataclass(frozen=True)
class SolverSettings:
    initial_guess: float = 0.10
    tolerance: float = 0.0001  # absolute, in currency units
    max_iterations: int = 100
    lower_bound: float = -1.0  # exclusive
    upper_bound: float = 10.0  # inclusive (1000%)

    def __post_init__(self) -> None:
        if self.lower_bound < -1.0:
            raise ValueError(f"lower_bound cannot be below -1 (-100%), got {self.lower_bound}")
        if self.upper_bound <= self.lower_bound:
            raise ValueError(
                f"upper_bound must exceed lower_bound, got ({self.lower_bound}, {self.upper_bound}]"
            )
        if not self.lower_bound < self.initial_guess <= self.upper_bound:
            raise ValueError(
                f"initial_guess {self.initial_guess} outside ({self.lower_bound}, {self.upper_bound}]"
            )
        if self.tolerance < 0:
            raise ValueError(f"tolerance cannot be negative, got {self.tolerance}")
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations cannot be negative, got {self.max_iterations}")


DEFAULT_SOLVER = SolverSettings()


@dataclass(frozen=True)
class IRRResult:
    """
    Outcome of the Newton-Raphson search.

    `rate` is always the solver's best estimate; `converged` is True only when
    |NPV(rate)| fell below the tolerance.
    """

    rate: float
    converged: bool
    iterations: int
    status: str

    @property
    def percent(self) -> float:
        return self.rate * 100.0


def _flows(cashflows: Iterable) -> List[tuple]:
    # Accepts CashFlowPeriod-like objects (period, net_flow) or (period, net) pairs.
    out = []
    for cf in cashflows:
        if isinstance(cf, tuple):
            out.append((int(cf[0]), float(cf[1])))
        else:
            out.append((int(cf.period), float(cf.net_flow)))
    return out


def _discounted(amount: float, base: float, exponent: int) -> float:
    # amount / base**exponent, saturating instead of raising: an overflowing
    # factor discounts the amount to 0, an underflowing one sends it to +/-inf.
    try:
        factor = base ** exponent
    except OverflowError:
        return 0.0
    if factor == 0.0:
        return math.copysign(math.inf, amount) if amount else 0.0
    return amount / factor


# ---------- NPV ----------
def npv(cashflows: Iterable, discount_rate: float, initial_investment: float) -> float:
    """
    Discounted cash flow with the investment at t=0:
        NPV(r) = -C0 + sum_t CF[t] / (1+r)^t
    where t is each period's own 1-based number, not its list position.
    """
    r = float(discount_rate)
    if r <= -1.0:
        raise UndefinedRateError(f"discount rate must be greater than -100%, got {r}")
    total = -float(initial_investment)
    for t, net in _flows(cashflows):
        total += _discounted(net, 1.0 + r, t)
    return total


def npv_derivative(cashflows: Iterable, rate: float) -> float:
    """dNPV/dr = sum_t -t * CF[t] / (1+r)^(t+1). The t=0 investment drops out."""
    r = float(rate)
    total = 0.0
    for t, net in _flows(cashflows):
        total -= _discounted(t * net, 1.0 + r, t + 1)
    return total


# ---------- IRR (Newton-Raphson) ----------
def irr(
    cashflows: Iterable,
    initial_investment: float,
    settings: Optional[SolverSettings] = None,
) -> IRRResult:
    """
    Rate r with NPV(r) = 0. Never raises for non-convergence: the last usable
    guess is returned with converged=False and the reason in `status`.
    """
    s = settings or DEFAULT_SOLVER
    flows = _flows(cashflows)
    guess = float(s.initial_guess)

    for i in range(s.max_iterations):
        value = npv(flows, guess, initial_investment)
        if abs(value) < s.tolerance:
            logger.debug("irr converged at %.8f after %d evaluations", guess, i + 1)
            return IRRResult(guess, True, i + 1, CONVERGED)

        slope = npv_derivative(flows, guess)
        if not (math.isfinite(value) and math.isfinite(slope)):
            logger.debug("irr stopped on non-finite NPV at %.8f", guess)
            return IRRResult(guess, False, i + 1, OUT_OF_BOUNDS)
        if abs(slope) < s.tolerance:
            logger.debug("irr stopped on flat derivative at %.8f", guess)
            return IRRResult(guess, False, i + 1, FLAT_DERIVATIVE)

        new_guess = guess - value / slope
        if not s.lower_bound < new_guess <= s.upper_bound:
            # keep the previous guess, the step left the meaningful domain
            logger.debug("irr step to %.6f outside (%s, %s]; keeping %.8f",
                         new_guess, s.lower_bound, s.upper_bound, guess)
            return IRRResult(guess, False, i + 1, OUT_OF_BOUNDS)

        guess = new_guess

    logger.debug("irr hit max_iterations=%d at %.8f", s.max_iterations, guess)
    return IRRResult(guess, False, s.max_iterations, MAX_ITERATIONS)


__all__ = [
    "CONVERGED",
    "FLAT_DERIVATIVE",
    "OUT_OF_BOUNDS",
    "MAX_ITERATIONS",
    "UndefinedRateError",
    "SolverSettings",
    "DEFAULT_SOLVER",
    "IRRResult",
    "npv",
    "npv_derivative",
    "irr",
]
