"""
Print calculator metrics for the default (reset) inputs.

Optional arguments override the frequency and reinvestment switch:
    python scripts/print_default_metrics.py weekly no-reinvest
"""
import sys
import os
from dataclasses import replace

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.calculations.investment import (
    DEFAULT_INPUTS,
    calculate_investment_metrics,
    coerce_frequency,
)
from app.calculations.formatting import format_metrics
from app.config import get_settings


def main():
    inputs = DEFAULT_INPUTS
    args = sys.argv[1:]

    if args:
        inputs = replace(inputs, irr_frequency=coerce_frequency(args[0]))
    if "no-reinvest" in args:
        inputs = replace(inputs, consider_reinvestment=False)

    metrics = calculate_investment_metrics(inputs)
    display = format_metrics(metrics, sentinel=get_settings().undefined_display)

    print("Inputs:")
    for key, value in inputs.to_dict().items():
        print(f"  {key}: {value}")

    print(f"\nMetrics ({metrics.irr_method.upper()}, {inputs.irr_frequency}):")
    for key, value in display.items():
        print(f"  {key}: {value}")

    for warning in metrics.warnings:
        print(f"  warning: {warning}")


if __name__ == "__main__":
    main()
