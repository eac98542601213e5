"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.calculations.records import (
    Acquisition,
    Loan,
    OperatingExpenses,
    PropertyFinancials,
    RentalIncome,
    Transaction,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def rental_income():
    """Structured income of $2,150/month."""
    return RentalIncome(
        monthly_rent="2000.00",
        parking_income_monthly="100",
        pet_rent_monthly=50,
    )


@pytest.fixture
def operating_expenses():
    """Structured expenses: $250/month fixed plus 8% management."""
    return OperatingExpenses(
        property_tax_annual="1800",
        insurance_annual="1200",
        hoa_monthly="0",
        management_rate="0.08",
        capex_rate="0.05",
    )


@pytest.fixture
def primary_loan():
    """Active primary loan with a known total payment."""
    return Loan(
        status="active",
        is_primary=True,
        current_balance="150000",
        interest_rate="0.045",
        term_months=360,
        total_monthly_payment="1000",
    )


@pytest.fixture
def acquisition():
    """Purchase details."""
    return Acquisition(
        purchase_price="200000",
        closing_costs="6000",
        down_payment_amount="40000",
        purchase_date="2022-06-15",
        current_value="250000",
    )


@pytest.fixture
def financials(rental_income, operating_expenses, primary_loan, acquisition):
    """Fully configured property."""
    return PropertyFinancials(
        property_type="SFR",
        rental_income=rental_income,
        operating_expenses=operating_expenses,
        loans=[primary_loan],
        transactions=[],
        acquisition=acquisition,
    )


@pytest.fixture
def make_transaction():
    """Factory for transactions with sensible defaults."""

    def _make(**overrides):
        values = {
            "type": "expense",
            "amount": "100",
            "transaction_date": "2024-03-15",
        }
        values.update(overrides)
        return Transaction(**values)

    return _make
