"""
Tests for the calculation API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from app.main import app

pytestmark = pytest.mark.integration


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def property_payload():
    """Fully configured property as posted by the UI."""
    return {
        "property_type": "SFR",
        "rental_income": {"monthly_rent": "2000", "parking_income_monthly": 150},
        "operating_expenses": {
            "property_tax_annual": "2400",
            "insurance_annual": "1200",
            "management_flat_fee": "100",
        },
        "loans": [
            {
                "status": "active",
                "is_primary": True,
                "current_balance": "160000",
                "interest_rate": "0.05",
                "term_months": 360,
                "total_monthly_payment": "1100",
            }
        ],
        "transactions": [
            {"type": "income", "amount": "2150", "transaction_date": "2024-03-01T00:00:00Z"},
            {"type": "expense", "amount": "350", "transaction_date": "2024-03-12", "category": "repairs"},
        ],
        "acquisition": {
            "purchase_price": "200000",
            "closing_costs": "4000",
            "purchase_date": "2023-01-10",
        },
        "current_value": "250000",
    }


class TestFinancialsAPI:
    """Test property financial endpoints."""

    def test_metrics(self, client, property_payload):
        """Test metrics with complete data succeed."""
        response = client.post("/api/calculate/metrics", json=property_payload)
        assert response.status_code == 200

        data = response.json()
        cash_flow = data["metrics"]["monthly_cash_flow"]
        # 2150 - (200 + 100 + 100 management) - 1100 debt
        assert cash_flow["status"] == "success"
        assert abs(cash_flow["value"] - 650.0) < 0.01
        assert "message" not in cash_flow

        assert data["metrics"]["equity"]["value"] == 90000.0
        assert abs(data["metrics"]["ltv"]["value"] - 64.0) < 0.01
        assert data["summary"]["income_source"] == "structured"
        assert data["acquisition"]["equity_velocity"] == 25.0

    def test_metrics_rent_only_is_incomplete(self, client):
        """Test rent without expenses reports incomplete cash flow."""
        response = client.post(
            "/api/calculate/metrics", json={"rental_income": {"monthly_rent": 2000}}
        )
        assert response.status_code == 200

        cash_flow = response.json()["metrics"]["monthly_cash_flow"]
        assert cash_flow == {
            "value": 2000.0,
            "status": "incomplete",
            "message": "Operating expenses not configured",
        }

    def test_metrics_invalid_payload(self, client):
        """Test malformed payload is rejected by validation."""
        response = client.post("/api/calculate/metrics", json={"loans": "many"})
        assert response.status_code == 422

    def test_metrics_extreme_loan_rate(self, client):
        """Test a loan rate entered as a whole percent still returns metrics."""
        response = client.post(
            "/api/calculate/metrics",
            json={
                "rental_income": {"monthly_rent": 2000},
                "loans": [{"current_balance": "100000", "interest_rate": "100", "term_months": 360}],
            },
        )
        assert response.status_code == 200
        assert abs(response.json()["summary"]["debt_service"] - 833333.33) < 0.01

    def test_cash_flow(self, client, property_payload):
        """Test projected vs actual comparison."""
        response = client.post("/api/calculate/cash-flow", json=property_payload)
        assert response.status_code == 200

        data = response.json()
        assert data["projected"]["has_data"] is True
        assert abs(data["projected"]["value"] - 650.0) < 0.01
        assert data["actual"]["value"] == 1800.0
        assert abs(data["variance"] - 1150.0) < 0.01
        assert data["net_cash_flow"] == 1800.0

    def test_monthly_cash_flow(self, client, property_payload):
        """Test trailing monthly comparison."""
        response = client.post(
            "/api/calculate/cash-flow/monthly",
            json={"property": property_payload, "as_of": "2024-03-20", "months": 3},
        )
        assert response.status_code == 200

        months = response.json()["months"]
        assert [m["month"] for m in months] == ["2024-01", "2024-02", "2024-03"]
        assert months[2]["actual"]["income"] == 2150.0
        assert months[0]["actual"]["income"] == 0

    def test_reserves(self, client, property_payload):
        """Test reserve tracking from the purchase date."""
        response = client.post(
            "/api/calculate/reserves",
            json={"property": property_payload, "as_of": "2024-03-31"},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["has_data"] is True
        # January 2023 through March 2024
        assert data["months_tracked"] == 15
        assert data["maintenance"]["total_spent"] == 350.0


class TestDepreciationAPI:
    """Test depreciation endpoints."""

    def test_schedule(self, client):
        """Test schedule generation."""
        response = client.post(
            "/api/calculate/depreciation/schedule",
            json={
                "property_type": "SFR",
                "purchase_price": 275000,
                "land_value": 0,
                "placed_in_service_date": "2024-01-15",
            },
        )
        assert response.status_code == 200

        data = response.json()
        assert data["depreciation_type"] == "residential"
        assert data["schedule"][0]["depreciation"] == 9583.33
        assert len(data["schedule"]) == 28
        assert abs(data["total_depreciation"] - 275000) < 1.0

    def test_schedule_requires_date(self, client):
        """Test missing in-service date is a bad request."""
        response = client.post(
            "/api/calculate/depreciation/schedule",
            json={"purchase_price": 275000},
        )
        assert response.status_code == 400

    def test_summary(self, client):
        """Test summary, tax shield and unclaimed estimate."""
        response = client.post(
            "/api/calculate/depreciation/summary",
            json={
                "property_type": "SFR",
                "purchase_price": 275000,
                "land_value": 0,
                "placed_in_service_date": "2020-01-10",
                "as_of": "2024-06-30",
            },
        )
        assert response.status_code == 200

        data = response.json()
        assert data["summary"]["accumulated_depreciation"] == 44583.33
        assert data["tax_shield"]["annual_tax_shield"] == 2400.0
        assert data["unclaimed_depreciation"] > 0

    def test_summary_without_date(self, client):
        """Test summary is null without an in-service date."""
        response = client.post(
            "/api/calculate/depreciation/summary",
            json={"purchase_price": 275000},
        )
        assert response.status_code == 200
        assert response.json()["summary"] is None

    def test_tax_shield(self, client):
        """Test tax shield at a custom rate."""
        response = client.post(
            "/api/calculate/depreciation/tax-shield",
            json={"annual_depreciation": 10000, "marginal_tax_rate": 0.32},
        )
        assert response.status_code == 200
        assert response.json()["annual_tax_shield"] == 3200.0

    def test_paper_loss(self, client):
        """Test paper loss comparison."""
        response = client.post(
            "/api/calculate/depreciation/paper-loss",
            json={"annual_cash_flow": 6000, "annual_depreciation": 10000},
        )
        assert response.status_code == 200
        assert response.json()["taxable_income"] == -4000.0

    def test_cost_segregation(self, client):
        """Test cost segregation potential."""
        response = client.post(
            "/api/calculate/depreciation/cost-segregation",
            json={"depreciable_basis": 500000, "amount_5_year": 100000, "bonus_percent": 1.0},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["potential"]["level"] == "High Alpha"
        assert data["first_year_benefit"] == 24000.0

    def test_export_csv(self, client):
        """Test CSV export response."""
        response = client.post(
            "/api/calculate/depreciation/export",
            json={
                "property_address": "123 Main St",
                "property_type": "Duplex",
                "purchase_price": 300000,
                "placed_in_service_date": "2023-01-15",
                "as_of": "2024-06-01",
            },
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")

        lines = response.text.splitlines()
        assert lines[0] == "DEPRECIATION SCHEDULE"
        assert lines[1] == "Property Address,123 Main St"
        assert "ANNUAL DEPRECIATION SCHEDULE" in lines

    def test_export_requires_date(self, client):
        """Test export without a date is a bad request."""
        response = client.post(
            "/api/calculate/depreciation/export",
            json={"property_address": "123 Main St", "property_type": "SFR", "purchase_price": 1},
        )
        assert response.status_code == 400


class TestHealthCheck:
    """Test health check endpoint."""

    def test_health_check(self, client):
        """Test health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
