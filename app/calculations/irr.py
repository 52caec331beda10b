"""
IRR, MIRR and NPV Calculations

Solves for annualized rates of return on a single upfront investment followed
by a schedule of dated inflows. Time is measured in years (offset_days /
days_per_year) so exponents stay small even for long daily schedules.
"""

import logging
import math
from typing import List, Optional, Tuple
from dataclasses import dataclass
import numpy as np

from app.calculations.cashflow import CashFlowEntry

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000
RATE_TOLERANCE = 1e-8
NPV_TOLERANCE = 1e-6
DERIVATIVE_FLOOR = 1e-10
DEFAULT_GUESS = 0.1
DAYS_PER_YEAR = 365

MIN_RATE = -0.99
MAX_RATE = 10.0

STATUS_CONVERGED = "converged"
STATUS_MAX_ITERATIONS = "max_iterations"
STATUS_DEGENERATE = "degenerate_derivative"
STATUS_UNDEFINED = "undefined"


@dataclass(frozen=True)
class IRRResult:
    """
    Outcome of an IRR solve.

    rate is None when the IRR is undefined for the inputs. A rate with
    converged=False is a best-effort answer (see status).
    """

    rate: Optional[float]
    converged: bool
    iterations: int
    status: str

    @property
    def is_defined(self) -> bool:
        return self.rate is not None


def _is_valid(initial_outflow: float, schedule: List[CashFlowEntry]) -> bool:
    if not math.isfinite(initial_outflow) or initial_outflow <= 0 or not schedule:
        return False
    return all(
        entry.offset_days > 0 and math.isfinite(entry.amount) and entry.amount > 0
        for entry in schedule
    )


def _as_arrays(
    schedule: List[CashFlowEntry], days_per_year: float
) -> Tuple[np.ndarray, np.ndarray]:
    """Year fractions and amounts as float arrays."""
    years = np.array([entry.offset_days for entry in schedule], dtype=float)
    amounts = np.array([entry.amount for entry in schedule], dtype=float)
    return years / days_per_year, amounts


def _npv(initial_outflow: float, years: np.ndarray, amounts: np.ndarray, rate: float) -> float:
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(-initial_outflow + np.sum(amounts / (1 + rate) ** years))


def _npv_derivative(years: np.ndarray, amounts: np.ndarray, rate: float) -> float:
    """Derivative of NPV with respect to rate (for Newton-Raphson)."""
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(-np.sum(years * amounts / (1 + rate) ** (years + 1)))


def calculate_npv(
    initial_outflow: float,
    schedule: List[CashFlowEntry],
    discount_rate: float,
    days_per_year: float = DAYS_PER_YEAR,
) -> float:
    """
    Calculate NPV of an upfront outflow followed by dated inflows.

    Args:
        initial_outflow: Investment at time zero (positive number)
        schedule: Inflows with day offsets from time zero
        discount_rate: Annual discount rate (e.g., 0.10 for 10%)
        days_per_year: Day count used to convert offsets to years

    Returns:
        NPV value
    """
    if not schedule:
        return -initial_outflow
    years, amounts = _as_arrays(schedule, days_per_year)
    return _npv(initial_outflow, years, amounts, discount_rate)


def calculate_irr(
    initial_outflow: float,
    schedule: List[CashFlowEntry],
    guess: float = DEFAULT_GUESS,
    days_per_year: float = DAYS_PER_YEAR,
) -> IRRResult:
    """
    Calculate annualized IRR using Newton-Raphson on year fractions.

    The rate is clamped to [-0.99, 10] after every step. Convergence requires
    both a small step and a near-zero NPV.

    Args:
        initial_outflow: Investment at time zero (positive number)
        schedule: Inflows with day offsets from time zero
        guess: Initial guess for rate (default 0.1 = 10%)
        days_per_year: Day count used to convert offsets to years

    Returns:
        IRRResult; rate is None when the inputs have no defined IRR
    """
    if not _is_valid(initial_outflow, schedule):
        return IRRResult(rate=None, converged=False, iterations=0, status=STATUS_UNDEFINED)

    years, amounts = _as_arrays(schedule, days_per_year)
    rate = guess

    for iteration in range(1, MAX_ITERATIONS + 1):
        npv = _npv(initial_outflow, years, amounts, rate)
        dnpv = _npv_derivative(years, amounts, rate)

        if not (math.isfinite(npv) and math.isfinite(dnpv)):
            logger.warning(f"IRR overflowed at rate={rate:.6f} after {iteration} iterations")
            return IRRResult(
                rate=None, converged=False, iterations=iteration, status=STATUS_UNDEFINED
            )

        if abs(dnpv) < DERIVATIVE_FLOOR:
            logger.warning(
                f"IRR derivative vanished at rate={rate:.6f} after {iteration} iterations"
            )
            return IRRResult(
                rate=rate, converged=False, iterations=iteration, status=STATUS_DEGENERATE
            )

        new_rate = min(max(rate - npv / dnpv, MIN_RATE), MAX_RATE)

        if abs(new_rate - rate) < RATE_TOLERANCE and abs(npv) < NPV_TOLERANCE:
            return IRRResult(
                rate=new_rate, converged=True, iterations=iteration, status=STATUS_CONVERGED
            )

        rate = new_rate

    logger.warning(
        f"IRR did not converge in {MAX_ITERATIONS} iterations, last rate={rate:.6f}"
    )
    return IRRResult(
        rate=rate, converged=False, iterations=MAX_ITERATIONS, status=STATUS_MAX_ITERATIONS
    )


def calculate_mirr(
    initial_outflow: float,
    schedule: List[CashFlowEntry],
    reinvestment_rate: float,
    days_per_year: float = DAYS_PER_YEAR,
) -> Optional[float]:
    """
    Calculate annualized MIRR.

    Every inflow is compounded forward at the reinvestment rate to the last
    inflow date; MIRR is the annual rate that grows the investment into that
    terminal value.

    Returns:
        MIRR as decimal, or None if not calculable or not finite
    """
    if not _is_valid(initial_outflow, schedule):
        return None
    if not math.isfinite(reinvestment_rate) or reinvestment_rate <= -1:
        return None

    years, amounts = _as_arrays(schedule, days_per_year)
    horizon_years = float(np.max(years))
    if horizon_years <= 0:
        return None

    with np.errstate(over="ignore", invalid="ignore"):
        future_value = float(
            np.sum(amounts * (1 + reinvestment_rate) ** (horizon_years - years))
        )
        mirr = float(np.power(future_value / initial_outflow, 1 / horizon_years)) - 1

    if not math.isfinite(future_value) or future_value <= 0 or not math.isfinite(mirr):
        logger.warning(f"MIRR is not finite over a {horizon_years:.2f} year horizon")
        return None

    return mirr


def calculate_multiple(
    initial_outflow: float, schedule: List[CashFlowEntry]
) -> Optional[float]:
    """
    Calculate the recovery multiple (e.g., 1.8 = 1.8x the investment).
    """
    if not math.isfinite(initial_outflow) or initial_outflow <= 0:
        return None
    return sum(entry.amount for entry in schedule) / initial_outflow
