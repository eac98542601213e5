"""
Property financial calculation API endpoints.

Callers post the property's structured records (income, expenses,
loans, acquisition) and optionally its transactions; the endpoints
return metrics tagged with status, cash flow comparisons and reserves.
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import List, Optional, Union

from fastapi import APIRouter
from pydantic import BaseModel

from app.calculations import cashflow, metrics, reserves
from app.calculations.numeric import parse_local_date
from app.calculations.records import (
    Acquisition,
    Loan,
    OperatingExpenses,
    PropertyFinancials,
    RentalIncome,
    Transaction,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Amounts may arrive as numbers or as string-encoded decimals
AmountField = Optional[Union[float, str]]


class RentalIncomeInput(BaseModel):
    """Structured monthly rental income."""

    monthly_rent: AmountField = None
    other_income_monthly: AmountField = None
    parking_income_monthly: AmountField = None
    laundry_income_monthly: AmountField = None
    pet_rent_monthly: AmountField = None
    storage_income_monthly: AmountField = None
    utility_reimbursement_monthly: AmountField = None


class OperatingExpensesInput(BaseModel):
    """Structured operating expenses. Rates are decimals."""

    property_tax_annual: AmountField = None
    insurance_annual: AmountField = None
    hoa_monthly: AmountField = None
    water_sewer_monthly: AmountField = None
    trash_monthly: AmountField = None
    electric_monthly: AmountField = None
    gas_monthly: AmountField = None
    internet_monthly: AmountField = None
    lawn_care_monthly: AmountField = None
    snow_removal_monthly: AmountField = None
    pest_control_monthly: AmountField = None
    pool_maintenance_monthly: AmountField = None
    alarm_monitoring_monthly: AmountField = None
    other_expenses_monthly: AmountField = None
    other_expenses_description: Optional[str] = None
    management_flat_fee: AmountField = None
    management_rate: AmountField = None
    capex_rate: AmountField = None
    maintenance_rate: AmountField = None
    vacancy_rate: AmountField = None


class LoanInput(BaseModel):
    """Loan secured by the property."""

    status: str = "active"
    is_primary: bool = False
    current_balance: AmountField = None
    interest_rate: AmountField = None
    term_months: Optional[int] = None
    monthly_principal_interest: AmountField = None
    monthly_escrow: AmountField = None
    total_monthly_payment: AmountField = None


class TransactionInput(BaseModel):
    """Ledger entry. Dates are read as local calendar dates."""

    type: str
    amount: AmountField = None
    transaction_date: Optional[str] = None
    is_excluded: bool = False
    is_recurring: bool = False
    recurrence_frequency: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None
    id: Optional[str] = None


class AcquisitionInput(BaseModel):
    """Purchase details."""

    purchase_price: AmountField = None
    closing_costs: AmountField = None
    down_payment_amount: AmountField = None
    purchase_date: Optional[str] = None
    current_value: AmountField = None


class PropertyInput(BaseModel):
    """Everything known about one property."""

    property_type: Optional[str] = None
    rental_income: Optional[RentalIncomeInput] = None
    operating_expenses: Optional[OperatingExpensesInput] = None
    loans: List[LoanInput] = []
    transactions: Optional[List[TransactionInput]] = None
    acquisition: Optional[AcquisitionInput] = None
    current_value: AmountField = None

    def to_financials(self) -> PropertyFinancials:
        """Convert to the engine's input record."""
        return PropertyFinancials(
            property_type=self.property_type,
            rental_income=(
                RentalIncome(**self.rental_income.model_dump())
                if self.rental_income is not None
                else None
            ),
            operating_expenses=(
                OperatingExpenses(**self.operating_expenses.model_dump())
                if self.operating_expenses is not None
                else None
            ),
            loans=[Loan(**loan.model_dump()) for loan in self.loans],
            transactions=(
                [Transaction(**t.model_dump()) for t in self.transactions]
                if self.transactions is not None
                else None
            ),
            acquisition=(
                Acquisition(**self.acquisition.model_dump())
                if self.acquisition is not None
                else None
            ),
            current_value=self.current_value,
        )


class MonthlyComparisonInput(BaseModel):
    """Input for the trailing monthly comparison."""

    property: PropertyInput
    as_of: Optional[date] = None
    months: int = 12


class ReserveInput(BaseModel):
    """Input for reserve fund tracking."""

    property: PropertyInput
    as_of: Optional[date] = None
    start_date: Optional[date] = None


@router.post("/metrics")
async def calculate_metrics(inputs: PropertyInput):
    """Headline metrics with status, plus the operating summary."""
    financials = inputs.to_financials()

    result = metrics.property_metrics(financials)
    degraded = [
        name for name, metric in vars(result).items() if metric.is_degraded
    ]
    if degraded:
        logger.info("Metrics computed with degraded status: %s", ", ".join(degraded))

    current_value = metrics.resolve_current_value(financials)

    return {
        "metrics": result.to_dict(),
        "summary": asdict(cashflow.operating_summary(financials)),
        "acquisition": asdict(
            metrics.acquisition_metrics(financials.acquisition, current_value)
        ),
    }


@router.post("/cash-flow")
async def calculate_cash_flow(inputs: PropertyInput):
    """Projected vs actual monthly cash flow."""
    comparison = cashflow.cash_flow_comparison(inputs.to_financials())
    return asdict(comparison)


@router.post("/cash-flow/monthly")
async def calculate_monthly_cash_flow(inputs: MonthlyComparisonInput):
    """Projected vs actual for each trailing month."""
    as_of = inputs.as_of or date.today()
    months = cashflow.monthly_comparison(
        inputs.property.to_financials(), as_of, inputs.months
    )
    return {"months": [asdict(month) for month in months]}


@router.post("/reserves")
async def calculate_reserves(inputs: ReserveInput):
    """Maintenance and CapEx reserve funds against actual spending."""
    financials = inputs.property.to_financials()
    summary = cashflow.operating_summary(financials)

    start_date = inputs.start_date
    if start_date is None and financials.acquisition is not None:
        start_date = parse_local_date(financials.acquisition.purchase_date)

    expenses = financials.operating_expenses
    tracking = reserves.reserve_tracking(
        gross_income=summary.gross_income,
        transactions=financials.transactions,
        as_of=inputs.as_of or date.today(),
        start_date=start_date,
        maintenance_rate=expenses.maintenance_rate if expenses else None,
        capex_rate=expenses.capex_rate if expenses else None,
    )

    result = asdict(tracking)
    result["has_data"] = tracking.has_data
    return result
