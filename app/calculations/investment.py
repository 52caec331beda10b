"""
Investment Model

Derives PCF, YITO payback period, ROI and IRR/MIRR from the calculator's
business inputs. Every call is a pure function of its InvestmentInputs.
"""

import logging
import math
from typing import Any, Mapping, Optional, Tuple
from dataclasses import dataclass, asdict

from app.calculations import cashflow, irr

logger = logging.getLogger(__name__)

# equipment_cost is entered in units of 10,000
INVESTMENT_UNIT = 10000
DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30

METHOD_IRR = "irr"
METHOD_MIRR = "mirr"


@dataclass(frozen=True)
class InvestmentInputs:
    """Calculator inputs. Rates are fractions (0.93 for 93%)."""

    room_count: float = 0.0
    occupancy_rate: float = 0.0
    avg_price: float = 0.0
    profit_share_rate: float = 0.0
    device_count: float = 0.0
    equipment_cost: float = 0.0
    expected_annual_return: float = 0.0
    irr_frequency: str = cashflow.DEFAULT_FREQUENCY
    consider_reinvestment: bool = True

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DerivedMetrics:
    """
    Calculated metrics. None means the metric is undefined for the inputs.
    """

    pcf_daily: float
    pcf_monthly: float
    total_investment: float
    avg_equipment_price: Optional[float]
    daily_return: float
    yito_period_days: int
    target_recovery: Optional[float]
    roi: Optional[float]
    irr_annual: Optional[float]
    irr_method: str
    irr_status: str
    cash_flow_count: int
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        data = asdict(self)
        data["warnings"] = list(self.warnings)
        return data


# Reset values of the landing page calculator
DEFAULT_INPUTS = InvestmentInputs(
    room_count=16,
    occupancy_rate=0.93,
    avg_price=280,
    profit_share_rate=0.30,
    device_count=28,
    equipment_cost=35.64,
    expected_annual_return=0.18,
    irr_frequency=cashflow.DAILY,
    consider_reinvestment=True,
)


def coerce_number(value: Any, upper: Optional[float] = None) -> float:
    """
    Coerce a raw form value to a non-negative finite float.

    Missing, unparseable, non-finite, negative or above-upper values become 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0

    if not math.isfinite(number) or number < 0:
        return 0.0
    if upper is not None and number > upper:
        return 0.0
    return number


def coerce_frequency(value: Any) -> str:
    """Normalize a frequency name; unknown values fall back to daily."""
    if isinstance(value, str):
        value = value.strip().lower()
        if value in cashflow.FREQUENCIES:
            return value
    return cashflow.DEFAULT_FREQUENCY


def coerce_flag(value: Any, default: bool = True) -> bool:
    """Interpret checkbox-style values ("true", "on", 1, ...) as booleans."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if isinstance(value, (int, float)):
        return value != 0
    return default


def coerce_inputs(raw: Mapping[str, Any]) -> InvestmentInputs:
    """Build InvestmentInputs from raw form fields."""
    return InvestmentInputs(
        room_count=coerce_number(raw.get("room_count")),
        occupancy_rate=coerce_number(raw.get("occupancy_rate"), upper=1.0),
        avg_price=coerce_number(raw.get("avg_price")),
        profit_share_rate=coerce_number(raw.get("profit_share_rate"), upper=1.0),
        device_count=coerce_number(raw.get("device_count")),
        equipment_cost=coerce_number(raw.get("equipment_cost")),
        expected_annual_return=coerce_number(raw.get("expected_annual_return")),
        irr_frequency=coerce_frequency(raw.get("irr_frequency")),
        consider_reinvestment=coerce_flag(raw.get("consider_reinvestment")),
    )


def calculate_pcf_daily(inputs: InvestmentInputs) -> float:
    """PCF = rooms x occupancy x average price x profit share."""
    return (
        inputs.room_count
        * inputs.occupancy_rate
        * inputs.avg_price
        * inputs.profit_share_rate
    )


def calculate_yito_period(
    pcf_daily: float, total_investment: float, daily_return: float
) -> float:
    """
    Solve pcf_daily * T = total_investment * (1 + daily_return * T) for T.

    Returns:
        Payback horizon in days, or 0 when no positive finite solution exists
    """
    denominator = pcf_daily - total_investment * daily_return
    if denominator <= 0 or total_investment <= 0:
        return 0.0
    period = total_investment / denominator
    return period if math.isfinite(period) else 0.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def calculate_investment_metrics(inputs: InvestmentInputs) -> DerivedMetrics:
    """
    Calculate all calculator metrics for one input snapshot.

    Inputs are coerced first, so invalid fields count as 0. Metrics that
    cannot be computed are reported as None; one undefined metric never
    prevents the others from being calculated.
    """
    inputs = coerce_inputs(inputs.to_dict())
    warnings = []

    pcf_daily = calculate_pcf_daily(inputs)
    pcf_monthly = pcf_daily * DAYS_PER_MONTH

    total_investment = inputs.equipment_cost * INVESTMENT_UNIT
    avg_equipment_price = (
        total_investment / inputs.device_count if inputs.device_count > 0 else None
    )

    daily_return = inputs.expected_annual_return / DAYS_PER_YEAR

    yito_period_days = _round_half_up(
        calculate_yito_period(pcf_daily, total_investment, daily_return)
    )

    target_recovery = None
    roi = None
    if yito_period_days > 0:
        target_recovery = _finite_or_none(pcf_daily * yito_period_days)
        if target_recovery is not None:
            roi = _finite_or_none(target_recovery / total_investment)

    schedule = []
    if yito_period_days > cashflow.MAX_HORIZON_DAYS:
        warnings.append(
            f"Payback period of {yito_period_days} days exceeds "
            f"{cashflow.MAX_HORIZON_DAYS} days, rate of return not calculated"
        )
    else:
        schedule = cashflow.build_schedule(
            inputs.irr_frequency, yito_period_days, pcf_daily
        )

    irr_annual = None
    irr_status = irr.STATUS_UNDEFINED
    if inputs.consider_reinvestment:
        irr_method = METHOD_MIRR
        if schedule:
            irr_annual = irr.calculate_mirr(
                total_investment,
                schedule,
                inputs.expected_annual_return,
                days_per_year=DAYS_PER_YEAR,
            )
            if irr_annual is not None:
                irr_status = irr.STATUS_CONVERGED
    else:
        irr_method = METHOD_IRR
        if schedule:
            result = irr.calculate_irr(
                total_investment, schedule, days_per_year=DAYS_PER_YEAR
            )
            irr_annual = result.rate
            irr_status = result.status
            if result.is_defined and not result.converged:
                warnings.append(
                    f"IRR is approximate ({result.status} after {result.iterations} iterations)"
                )

    if yito_period_days == 0:
        warnings.append("No feasible payback period for the given cost and return")

    metrics = DerivedMetrics(
        pcf_daily=pcf_daily,
        pcf_monthly=pcf_monthly,
        total_investment=total_investment,
        avg_equipment_price=avg_equipment_price,
        daily_return=daily_return,
        yito_period_days=yito_period_days,
        target_recovery=target_recovery,
        roi=roi,
        irr_annual=irr_annual,
        irr_method=irr_method,
        irr_status=irr_status,
        cash_flow_count=len(schedule),
        warnings=tuple(warnings),
    )

    logger.debug(
        f"Investment model: rooms={inputs.room_count} occupancy={inputs.occupancy_rate} "
        f"price={inputs.avg_price} share={inputs.profit_share_rate} "
        f"equipment={inputs.equipment_cost} return={inputs.expected_annual_return} "
        f"-> pcf={pcf_daily:.2f}/day yito={yito_period_days} days "
        f"roi={roi} {irr_method}={irr_annual} ({irr_status})"
    )

    return metrics
