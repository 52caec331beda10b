"""
Display formatting for calculator metrics.
"""

import math
from typing import Dict, Optional

from app.calculations.investment import DerivedMetrics

UNDEFINED_DISPLAY = "N/A"


def format_number(
    value: Optional[float], decimals: int = 2, sentinel: str = UNDEFINED_DISPLAY
) -> str:
    """Fixed-decimal, thousands-grouped string (e.g. 1,234.50)."""
    if value is None or not math.isfinite(value):
        return sentinel
    return f"{value:,.{decimals}f}"


def format_percent(
    value: Optional[float], decimals: int = 2, sentinel: str = UNDEFINED_DISPLAY
) -> str:
    """Format a fraction as a percentage number (0.1834 -> 18.34)."""
    if value is None or not math.isfinite(value):
        return sentinel
    return format_number(value * 100, decimals, sentinel)


def format_metrics(
    metrics: DerivedMetrics, sentinel: str = UNDEFINED_DISPLAY
) -> Dict[str, str]:
    """
    Render metrics the way the calculator displays them.

    Currency and ROI use 2 decimals, day counts and the average equipment
    price use 0, IRR is shown as a percentage.
    """
    return {
        "pcf_daily": format_number(metrics.pcf_daily, 2, sentinel),
        "pcf_monthly": format_number(metrics.pcf_monthly, 2, sentinel),
        "total_investment": format_number(metrics.total_investment, 2, sentinel),
        "avg_equipment_price": format_number(metrics.avg_equipment_price, 0, sentinel),
        "yito_period_days": format_number(metrics.yito_period_days, 0, sentinel),
        "target_recovery": format_number(metrics.target_recovery, 2, sentinel),
        "roi": format_number(metrics.roi, 2, sentinel),
        "irr_annual": format_percent(metrics.irr_annual, 2, sentinel),
    }
