"""
Cash Flow Calculations

Net operating income and cash flow for a property, plus the comparison
between projected (structured data) and actual (transaction) cash flow.
All figures are monthly.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from app.calculations.debt import total_debt_service
from app.calculations.expenses import has_operating_expenses, total_fixed_expenses
from app.calculations.income import income_source
from app.calculations.numeric import (
    month_key,
    parse_local_date,
    safe_divide,
    to_amount,
    trailing_months,
)
from app.calculations.records import PropertyFinancials, Transaction, active_transactions
from app.calculations.reserves import capex_reserve
from app.calculations.results import value_or_zero


def calculate_noi(gross_income: float, fixed_expenses: float, capex: float) -> float:
    """NOI = gross income - fixed expenses - CapEx reserve."""
    return gross_income - fixed_expenses - capex


def calculate_cash_flow(noi: float, debt_service: float) -> float:
    """Cash flow = NOI - debt service."""
    return noi - debt_service


def variance_percent(variance: float, projected: float) -> Optional[float]:
    """Variance as a percentage of |projected|. None when projected is zero."""
    ratio = safe_divide(variance, abs(projected))
    return ratio * 100 if ratio is not None else None


@dataclass
class OperatingSummary:
    """Monthly operating picture of a property."""

    gross_income: float
    income_source: str
    fixed_expenses: float
    capex_reserve: float
    noi: float
    debt_service: float
    cash_flow: float
    has_operating_expenses: bool


def operating_summary(financials: PropertyFinancials) -> OperatingSummary:
    """
    Combine income, expenses, reserves and debt into NOI and cash flow.

    This is the single place the engine assembles a property's monthly
    cash flow; dashboard metrics and the projected track both use it.
    """
    source = income_source(financials.rental_income, financials.transactions)
    gross = value_or_zero(source)

    fixed = total_fixed_expenses(
        financials.operating_expenses, financials.transactions, gross
    )
    capex_rate = (
        financials.operating_expenses.capex_rate if financials.operating_expenses else None
    )
    capex = capex_reserve(gross, capex_rate)
    noi = calculate_noi(gross, fixed, capex)
    debt_service = total_debt_service(financials.loans)

    return OperatingSummary(
        gross_income=gross,
        income_source=source.kind,
        fixed_expenses=fixed,
        capex_reserve=capex,
        noi=noi,
        debt_service=debt_service,
        cash_flow=calculate_cash_flow(noi, debt_service),
        has_operating_expenses=has_operating_expenses(financials.operating_expenses, fixed),
    )


# =============================================================================
# PROJECTED VS ACTUAL
# =============================================================================


@dataclass
class CashFlowTrack:
    """One side of the projected/actual comparison."""

    value: Optional[float]
    has_data: bool
    source: Optional[str] = None


@dataclass
class CashFlowComparison:
    projected: CashFlowTrack
    actual: CashFlowTrack
    variance: Optional[float]
    variance_percent: Optional[float]
    net_cash_flow: float


def projected_cash_flow(financials: PropertyFinancials) -> CashFlowTrack:
    """Cash flow from structured data; no data without income or expense records."""
    if financials.rental_income is None and financials.operating_expenses is None:
        return CashFlowTrack(value=None, has_data=False)
    return CashFlowTrack(
        value=operating_summary(financials).cash_flow,
        has_data=True,
        source="structured",
    )


def _income_minus_expenses(transactions: List[Transaction]) -> float:
    income = sum(to_amount(t.amount) for t in transactions if t.is_income)
    expenses = sum(to_amount(t.amount) for t in transactions if t.is_expense)
    return income - expenses


def actual_cash_flow(transactions: Optional[List[Transaction]]) -> CashFlowTrack:
    """Cash flow from transactions; no data when none were supplied."""
    if transactions is None:
        return CashFlowTrack(value=None, has_data=False)
    return CashFlowTrack(
        value=_income_minus_expenses(active_transactions(transactions)),
        has_data=True,
        source="transactions",
    )


def cash_flow_comparison(financials: PropertyFinancials) -> CashFlowComparison:
    """
    Compare projected and actual cash flow.

    variance = actual - projected, and is None unless both sides have data.
    net_cash_flow prefers actual, then projected, then 0.
    """
    projected = projected_cash_flow(financials)
    actual = actual_cash_flow(financials.transactions)

    variance = None
    pct = None
    if projected.has_data and actual.has_data:
        variance = actual.value - projected.value
        pct = variance_percent(variance, projected.value)

    if actual.has_data:
        net = actual.value
    elif projected.has_data:
        net = projected.value
    else:
        net = 0.0

    return CashFlowComparison(
        projected=projected,
        actual=actual,
        variance=variance,
        variance_percent=pct,
        net_cash_flow=net,
    )


# =============================================================================
# MONTHLY COMPARISON
# =============================================================================


@dataclass
class MonthlyProjected:
    income: float
    expenses: float
    noi: float
    cash_flow: float


@dataclass
class MonthlyActual:
    income: float
    expenses: float
    cash_flow: float


@dataclass
class MonthlyVariance:
    income: float
    expenses: float
    cash_flow: float
    cash_flow_percent: Optional[float]


@dataclass
class MonthlyComparison:
    month: str
    projected: Optional[MonthlyProjected]
    actual: Optional[MonthlyActual]
    variance: Optional[MonthlyVariance]


def _monthly_projection(financials: PropertyFinancials) -> Optional[MonthlyProjected]:
    if financials.rental_income is None and financials.operating_expenses is None:
        return None
    summary = operating_summary(financials)
    return MonthlyProjected(
        income=summary.gross_income,
        expenses=summary.fixed_expenses + summary.capex_reserve,
        noi=summary.noi,
        cash_flow=summary.cash_flow,
    )


def _actual_for_month(transactions: List[Transaction], month: str) -> MonthlyActual:
    in_month = []
    for transaction in transactions:
        transaction_date = parse_local_date(transaction.transaction_date)
        if transaction_date is not None and month_key(transaction_date) == month:
            in_month.append(transaction)

    income = sum(to_amount(t.amount) for t in in_month if t.is_income)
    expenses = sum(to_amount(t.amount) for t in in_month if t.is_expense)
    return MonthlyActual(income=income, expenses=expenses, cash_flow=income - expenses)


def monthly_comparison(
    financials: PropertyFinancials, as_of: date, months_count: int = 12
) -> List[MonthlyComparison]:
    """
    Projected vs actual for each of the trailing `months_count` months.

    The projection is the same for every month. Transactions are bucketed
    by their local calendar date.
    """
    projected = _monthly_projection(financials)
    transactions = (
        active_transactions(financials.transactions)
        if financials.transactions is not None
        else None
    )

    results = []
    for month in trailing_months(as_of, months_count):
        actual = _actual_for_month(transactions, month) if transactions is not None else None

        variance = None
        if projected is not None and actual is not None:
            cash_flow_variance = actual.cash_flow - projected.cash_flow
            variance = MonthlyVariance(
                income=actual.income - projected.income,
                expenses=actual.expenses - projected.expenses,
                cash_flow=cash_flow_variance,
                cash_flow_percent=variance_percent(cash_flow_variance, projected.cash_flow),
            )

        results.append(MonthlyComparison(month, projected, actual, variance))

    return results
