"""
Financial Calculation Engine

Core calculation modules for the hotel revenue-share investment calculator.
All calculations are pure functions of their inputs.
"""

from app.calculations import cashflow, irr, investment, formatting

__all__ = ["cashflow", "irr", "investment", "formatting"]
