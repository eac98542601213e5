"""
Reserve Calculations

CapEx reserve as a rate on gross income, and tracking of maintenance and
CapEx reserve funds against actual spending over time.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from app.calculations.numeric import (
    Amount,
    month_key,
    months_between,
    parse_local_date,
    to_amount,
    to_optional_amount,
)
from app.calculations.records import Transaction, active_transactions

DEFAULT_MAINTENANCE_RATE = 0.03
DEFAULT_CAPEX_RATE = 0.05

# Balance below this many months of accrual is flagged
WARNING_MONTHS_OF_RESERVE = 2

MAINTENANCE_CATEGORIES = ("maintenance", "repairs")
MAINTENANCE_SUBCATEGORIES = ("landscaping", "pest_control", "hvac", "plumbing", "electrical")
CAPEX_CATEGORIES = ("capex", "capital_improvements", "capital_expenditure")


def capex_reserve(gross_income: float, capex_rate: Amount) -> float:
    """
    Calculate the monthly CapEx reserve.

    Args:
        gross_income: Gross monthly income
        capex_rate: Reserve rate as decimal (e.g., 0.05 for 5%)

    Returns:
        gross_income * rate, or 0 when income is not positive or rate unset
    """
    rate = to_optional_amount(capex_rate)
    if gross_income <= 0 or not rate:
        return 0.0
    return gross_income * rate


@dataclass
class MonthlyReserve:
    month: str
    accrued: float
    spent: float
    balance: float


@dataclass
class ReserveFund:
    monthly_accrual: float
    total_accrued: float = 0.0
    total_spent: float = 0.0
    balance: float = 0.0
    monthly_breakdown: List[MonthlyReserve] = field(default_factory=list)
    status: str = "healthy"


@dataclass
class ReserveTracking:
    maintenance: ReserveFund
    capex: ReserveFund
    total_accrued: float
    total_spent: float
    balance: float
    months_tracked: int

    @property
    def has_data(self) -> bool:
        return self.months_tracked > 0


def reserve_status(balance: float, monthly_accrual: float) -> str:
    """healthy, warning (under two months of accrual) or depleted (negative)."""
    if balance < 0:
        return "depleted"
    if balance < monthly_accrual * WARNING_MONTHS_OF_RESERVE:
        return "warning"
    return "healthy"


def _is_maintenance(transaction: Transaction) -> bool:
    category = (transaction.category or "").lower()
    subcategory = (transaction.subcategory or "").lower()
    return category in MAINTENANCE_CATEGORIES or subcategory in MAINTENANCE_SUBCATEGORIES


def _is_capex(transaction: Transaction) -> bool:
    return (transaction.category or "").lower() in CAPEX_CATEGORIES


def _build_fund(
    months: List[str], monthly_accrual: float, spend_by_month: Dict[str, float]
) -> ReserveFund:
    fund = ReserveFund(monthly_accrual=monthly_accrual)
    running = 0.0
    for month in months:
        spent = spend_by_month.get(month, 0.0)
        running += monthly_accrual - spent
        fund.monthly_breakdown.append(MonthlyReserve(month, monthly_accrual, spent, running))
        fund.total_spent += spent

    fund.total_accrued = monthly_accrual * len(months)
    fund.balance = running
    fund.status = reserve_status(running, monthly_accrual)
    return fund


def reserve_tracking(
    gross_income: float,
    transactions: Optional[List[Transaction]],
    as_of: date,
    start_date: Optional[date] = None,
    maintenance_rate: Amount = None,
    capex_rate: Amount = None,
) -> ReserveTracking:
    """
    Track theoretical reserve funds against actual spending.

    Each month accrues gross_income * rate into the maintenance and CapEx
    funds; categorized expense transactions in that month draw them down.

    Args:
        gross_income: Current gross monthly income
        transactions: Property transactions
        as_of: Last month tracked
        start_date: First month tracked (usually the purchase date). Falls
            back to the earliest transaction date.
        maintenance_rate: Decimal rate, default 3%
        capex_rate: Decimal rate, default 5%
    """
    maintenance_rate = to_optional_amount(maintenance_rate) or DEFAULT_MAINTENANCE_RATE
    capex_rate = to_optional_amount(capex_rate) or DEFAULT_CAPEX_RATE

    maintenance_accrual = gross_income * maintenance_rate
    capex_accrual = gross_income * capex_rate

    active = active_transactions(transactions)
    dated = [(parse_local_date(t.transaction_date), t) for t in active]
    dated = [(d, t) for d, t in dated if d is not None]

    if start_date is None and dated:
        start_date = min(d for d, _ in dated)

    if start_date is None:
        return ReserveTracking(
            maintenance=ReserveFund(monthly_accrual=maintenance_accrual),
            capex=ReserveFund(monthly_accrual=capex_accrual),
            total_accrued=0.0,
            total_spent=0.0,
            balance=0.0,
            months_tracked=0,
        )

    months = months_between(start_date, as_of)

    maintenance_spend: Dict[str, float] = {}
    capex_spend: Dict[str, float] = {}
    for transaction_date, transaction in dated:
        if not transaction.is_expense:
            continue
        key = month_key(transaction_date)
        amount = to_amount(transaction.amount)
        if _is_maintenance(transaction):
            maintenance_spend[key] = maintenance_spend.get(key, 0.0) + amount
        if _is_capex(transaction):
            capex_spend[key] = capex_spend.get(key, 0.0) + amount

    maintenance = _build_fund(months, maintenance_accrual, maintenance_spend)
    capex = _build_fund(months, capex_accrual, capex_spend)

    return ReserveTracking(
        maintenance=maintenance,
        capex=capex,
        total_accrued=maintenance.total_accrued + capex.total_accrued,
        total_spent=maintenance.total_spent + capex.total_spent,
        balance=maintenance.balance + capex.balance,
        months_tracked=len(months),
    )
