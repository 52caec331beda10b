"""
Financial calculation API endpoints.

These endpoints accept calculator inputs and return calculated results.
Called by the landing page on every input change.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Any, Dict, List, Optional

from app.calculations import cashflow, irr, investment, formatting
from app.config import get_settings

router = APIRouter()

_DEFAULTS = investment.DEFAULT_INPUTS


class InvestmentInput(BaseModel):
    """
    Calculator form fields.

    Missing or unparseable numbers default to 0 rather than failing the
    request, so the page can always render the metrics it can compute.
    """

    # PCF
    room_count: float = 0.0
    occupancy_rate: float = 0.0
    avg_price: float = 0.0
    profit_share_rate: float = 0.0

    # Equipment investment (equipment_cost in units of 10,000)
    device_count: float = 0.0
    equipment_cost: float = 0.0

    # Return benchmark
    expected_annual_return: float = 0.0
    irr_frequency: str = cashflow.DEFAULT_FREQUENCY
    consider_reinvestment: bool = True

    @field_validator(
        "room_count",
        "avg_price",
        "device_count",
        "equipment_cost",
        "expected_annual_return",
        mode="before",
    )
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        return investment.coerce_number(value)

    @field_validator("occupancy_rate", "profit_share_rate", mode="before")
    @classmethod
    def _coerce_fraction(cls, value: Any) -> float:
        return investment.coerce_number(value, upper=1.0)

    @field_validator("irr_frequency", mode="before")
    @classmethod
    def _coerce_frequency(cls, value: Any) -> str:
        return investment.coerce_frequency(value)

    @field_validator("consider_reinvestment", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return investment.coerce_flag(value)

    def to_inputs(self) -> investment.InvestmentInputs:
        return investment.InvestmentInputs(**self.model_dump())


class InvestmentMetrics(BaseModel):
    """Calculated metrics. Null means undefined for the given inputs."""

    pcf_daily: float
    pcf_monthly: float
    total_investment: float
    avg_equipment_price: Optional[float] = None
    daily_return: float
    yito_period_days: int
    target_recovery: Optional[float] = None
    roi: Optional[float] = None
    irr_annual: Optional[float] = None
    irr_method: str
    irr_status: str
    cash_flow_count: int
    warnings: List[str] = []


class InvestmentResponse(BaseModel):
    """Response with sanitized inputs, metrics and display strings."""

    inputs: InvestmentInput
    metrics: InvestmentMetrics
    display: Dict[str, str]
    schedule: Optional[List[dict]] = None


@router.get("/defaults", response_model=InvestmentInput)
async def get_default_inputs():
    """Return the calculator's reset values."""
    return InvestmentInput(**_DEFAULTS.to_dict())


@router.post("/investment", response_model=InvestmentResponse)
async def calculate_investment(inputs: InvestmentInput, include_schedule: bool = False):
    """Calculate PCF, YITO period, ROI and IRR/MIRR for the calculator."""
    settings = get_settings()
    model_inputs = inputs.to_inputs()

    metrics = investment.calculate_investment_metrics(model_inputs)

    schedule_rows = None
    if include_schedule:
        schedule = cashflow.build_schedule(
            model_inputs.irr_frequency, metrics.yito_period_days, metrics.pcf_daily
        )
        schedule_rows = cashflow.schedule_to_rows(schedule)

    return InvestmentResponse(
        inputs=inputs,
        metrics=InvestmentMetrics(**metrics.to_dict()),
        display=formatting.format_metrics(metrics, sentinel=settings.undefined_display),
        schedule=schedule_rows,
    )


class CashFlowItem(BaseModel):
    """A dated inflow."""

    model_config = ConfigDict(allow_inf_nan=False)

    offset_days: int
    amount: float


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    model_config = ConfigDict(allow_inf_nan=False)

    initial_outflow: float
    cash_flows: List[CashFlowItem]
    reinvestment_rate: Optional[float] = None
    days_per_year: float = irr.DAYS_PER_YEAR


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    converged: bool
    status: str
    iterations: int
    mirr: Optional[float] = None
    multiple: Optional[float] = None
    npv_at_10_percent: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR (and MIRR when a reinvestment rate is given)."""
    if inputs.days_per_year <= 0:
        raise HTTPException(status_code=400, detail="days_per_year must be positive")

    schedule = [
        cashflow.CashFlowEntry(offset_days=cf.offset_days, amount=cf.amount)
        for cf in inputs.cash_flows
    ]

    result = irr.calculate_irr(
        inputs.initial_outflow, schedule, days_per_year=inputs.days_per_year
    )
    if not result.is_defined:
        raise HTTPException(
            status_code=400,
            detail="IRR is undefined: initial outflow and every cash flow "
            "offset and amount must be positive",
        )

    mirr_val = None
    if inputs.reinvestment_rate is not None:
        mirr_val = irr.calculate_mirr(
            inputs.initial_outflow,
            schedule,
            inputs.reinvestment_rate,
            days_per_year=inputs.days_per_year,
        )

    return IRRResponse(
        irr=result.rate,
        converged=result.converged,
        status=result.status,
        iterations=result.iterations,
        mirr=mirr_val,
        multiple=irr.calculate_multiple(inputs.initial_outflow, schedule),
        npv_at_10_percent=irr.calculate_npv(
            inputs.initial_outflow, schedule, 0.10, days_per_year=inputs.days_per_year
        ),
    )


class ScheduleInput(BaseModel):
    """Input for cash flow schedule generation."""

    model_config = ConfigDict(allow_inf_nan=False)

    horizon_days: int
    daily_amount: float
    frequency: str = cashflow.DEFAULT_FREQUENCY

    @field_validator("frequency", mode="before")
    @classmethod
    def _coerce_frequency(cls, value: Any) -> str:
        return investment.coerce_frequency(value)


@router.post("/schedule")
async def calculate_schedule(inputs: ScheduleInput):
    """Generate the cash flow schedule for a payback horizon."""
    if inputs.horizon_days > cashflow.MAX_HORIZON_DAYS:
        raise HTTPException(
            status_code=400,
            detail=f"horizon_days must not exceed {cashflow.MAX_HORIZON_DAYS}",
        )

    schedule = cashflow.build_schedule(
        inputs.frequency, inputs.horizon_days, inputs.daily_amount
    )

    return {
        "frequency": inputs.frequency,
        "schedule": cashflow.schedule_to_rows(schedule),
        "total": round(cashflow.schedule_total(schedule), 2),
    }
