"""
Tests for the calculation API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def scenario_payload():
    """Reference scenario as posted by the calculator form."""
    return {
        "room_count": 100,
        "occupancy_rate": 1.0,
        "avg_price": 200,
        "profit_share_rate": 0.10,
        "device_count": 50,
        "equipment_cost": 100,
        "expected_annual_return": 0.18,
        "irr_frequency": "daily",
        "consider_reinvestment": True,
    }


class TestHealth:
    """Test service endpoints."""

    def test_health_check(self, client):
        """Test health endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestInvestmentAPI:
    """Test investment calculator endpoints."""

    def test_get_defaults(self, client):
        """Test reset values endpoint."""
        response = client.get("/api/calculate/defaults")
        assert response.status_code == 200
        data = response.json()
        assert data["room_count"] == 16
        assert data["occupancy_rate"] == 0.93
        assert data["equipment_cost"] == 35.64
        assert data["irr_frequency"] == "daily"
        assert data["consider_reinvestment"] is True

    def test_calculate_investment(self, client, scenario_payload):
        """Test full metric calculation."""
        response = client.post("/api/calculate/investment", json=scenario_payload)
        assert response.status_code == 200
        data = response.json()

        metrics = data["metrics"]
        assert metrics["pcf_daily"] == 2000
        assert metrics["yito_period_days"] == 664
        assert metrics["irr_method"] == "mirr"
        assert 0.18 < metrics["irr_annual"] < 1.0

        assert data["display"]["pcf_daily"] == "2,000.00"
        assert data["display"]["roi"] == "1.33"
        assert data["schedule"] is None

    def test_calculate_investment_with_schedule(self, client, scenario_payload):
        """Test schedule rows are returned on request."""
        scenario_payload["irr_frequency"] = "weekly"
        response = client.post(
            "/api/calculate/investment",
            params={"include_schedule": True},
            json=scenario_payload,
        )
        assert response.status_code == 200
        data = response.json()
        schedule = data["schedule"]
        assert len(schedule) == data["metrics"]["cash_flow_count"] == 95
        assert schedule[-1]["offset_days"] == 664
        assert schedule[-1]["cumulative_amount"] == pytest.approx(2000 * 664)

    def test_unparseable_fields_default_to_zero(self, client, scenario_payload):
        """Test bad form values do not fail the request."""
        scenario_payload.update(
            {"room_count": "abc", "occupancy_rate": -1, "irr_frequency": "hourly"}
        )
        response = client.post("/api/calculate/investment", json=scenario_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["inputs"]["room_count"] == 0
        assert data["inputs"]["occupancy_rate"] == 0
        assert data["inputs"]["irr_frequency"] == "daily"
        assert data["metrics"]["pcf_daily"] == 0
        assert data["metrics"]["roi"] is None
        assert data["display"]["irr_annual"] == "N/A"

    def test_infeasible_payback(self, client, scenario_payload):
        """Test infeasible cost structure reports undefined metrics."""
        scenario_payload["equipment_cost"] = 1000
        response = client.post("/api/calculate/investment", json=scenario_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["metrics"]["yito_period_days"] == 0
        assert data["metrics"]["target_recovery"] is None
        assert data["metrics"]["irr_annual"] is None
        assert data["display"]["pcf_daily"] == "2,000.00"
        assert data["display"]["roi"] == "N/A"

    def test_near_break_even_horizon(self, client, scenario_payload):
        """Test an overly long payback horizon leaves the rate undefined."""
        scenario_payload.update(
            {"room_count": 1, "avg_price": 493.7757, "profit_share_rate": 1.0, "irr_frequency": "weekly"}
        )
        response = client.post(
            "/api/calculate/investment",
            params={"include_schedule": True},
            json=scenario_payload,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["metrics"]["irr_annual"] is None
        assert data["metrics"]["irr_status"] == "undefined"
        assert data["metrics"]["warnings"]
        assert data["schedule"] == []
        assert data["display"]["irr_annual"] == "N/A"

    def test_empty_body_uses_zero_inputs(self, client):
        """Test a blank form."""
        response = client.post("/api/calculate/investment", json={})
        assert response.status_code == 200
        assert response.json()["metrics"]["yito_period_days"] == 0


class TestIRRAPI:
    """Test raw IRR endpoint."""

    def test_calculate_irr(self, client):
        """Test IRR calculation endpoint."""
        response = client.post(
            "/api/calculate/irr",
            json={
                "initial_outflow": 100,
                "cash_flows": [{"offset_days": 365, "amount": 125}],
                "reinvestment_rate": 0.0,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert abs(data["irr"] - 0.25) < 1e-6
        assert abs(data["mirr"] - 0.25) < 1e-6
        assert data["converged"] is True
        assert data["multiple"] == pytest.approx(1.25)
        assert data["npv_at_10_percent"] > 0

    def test_calculate_irr_without_reinvestment(self, client):
        """Test MIRR is omitted without a reinvestment rate."""
        response = client.post(
            "/api/calculate/irr",
            json={
                "initial_outflow": 100,
                "cash_flows": [
                    {"offset_days": 365, "amount": 20},
                    {"offset_days": 730, "amount": 120},
                ],
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert abs(data["irr"] - 0.20) < 1e-6
        assert data["mirr"] is None

    def test_calculate_irr_invalid_cash_flows(self, client):
        """Test undefined IRR returns 400."""
        response = client.post(
            "/api/calculate/irr",
            json={"initial_outflow": 100, "cash_flows": []},
        )
        assert response.status_code == 400

    def test_calculate_irr_invalid_day_count(self, client):
        """Test non-positive day count is rejected."""
        response = client.post(
            "/api/calculate/irr",
            json={
                "initial_outflow": 100,
                "cash_flows": [{"offset_days": 365, "amount": 125}],
                "days_per_year": 0,
            },
        )
        assert response.status_code == 400

    def test_calculate_irr_rejects_nan(self, client):
        """Test NaN and Infinity literals fail validation."""
        response = client.post(
            "/api/calculate/irr",
            content='{"initial_outflow": NaN, "cash_flows": [{"offset_days": 365, "amount": 125}]}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422

        response = client.post(
            "/api/calculate/irr",
            content='{"initial_outflow": 100, "cash_flows": [{"offset_days": 365, "amount": Infinity}]}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422


class TestScheduleAPI:
    """Test schedule endpoint."""

    def test_calculate_schedule(self, client):
        """Test weekly schedule generation."""
        response = client.post(
            "/api/calculate/schedule",
            json={"horizon_days": 20, "daily_amount": 10, "frequency": "weekly"},
        )
        assert response.status_code == 200
        data = response.json()
        assert [row["amount"] for row in data["schedule"]] == [70, 70, 60]
        assert data["total"] == 200

    def test_calculate_schedule_empty(self, client):
        """Test non-positive horizon gives an empty schedule."""
        response = client.post(
            "/api/calculate/schedule",
            json={"horizon_days": 0, "daily_amount": 10},
        )
        assert response.status_code == 200
        assert response.json()["schedule"] == []

    def test_calculate_schedule_horizon_limit(self, client):
        """Test horizons past the limit are rejected."""
        response = client.post(
            "/api/calculate/schedule",
            json={"horizon_days": 10 ** 9, "daily_amount": 10},
        )
        assert response.status_code == 400
