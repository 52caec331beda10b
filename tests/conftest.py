"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.calculations.investment import InvestmentInputs


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture(scope="session")
def anyio_backend():
    """Backend for async tests."""
    return "asyncio"


@pytest.fixture
def scenario_inputs():
    """100 rooms fully booked at 200/day, 10% share, 1,000,000 invested, 18% benchmark."""
    return InvestmentInputs(
        room_count=100,
        occupancy_rate=1.0,
        avg_price=200,
        profit_share_rate=0.10,
        device_count=50,
        equipment_cost=100,
        expected_annual_return=0.18,
        irr_frequency="daily",
        consider_reinvestment=True,
    )
