"""
Expense Calculations

Fixed monthly operating expenses from structured expense records and
recurring expense transactions. CapEx reserve and debt service are not
fixed expenses; they are computed separately.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.calculations.numeric import to_amount, to_optional_amount
from app.calculations.records import OperatingExpenses, Transaction, active_transactions

logger = logging.getLogger(__name__)

# (field, line item id, label)
ANNUAL_EXPENSE_FIELDS = (
    ("property_tax_annual", "property-tax", "Property Tax"),
    ("insurance_annual", "insurance", "Insurance"),
)

MONTHLY_EXPENSE_FIELDS = (
    ("hoa_monthly", "hoa", "HOA"),
    ("water_sewer_monthly", "water-sewer", "Water/Sewer"),
    ("trash_monthly", "trash", "Trash"),
    ("electric_monthly", "electric", "Electric"),
    ("gas_monthly", "gas", "Gas"),
    ("internet_monthly", "internet", "Internet"),
    ("lawn_care_monthly", "lawn-care", "Lawn Care"),
    ("snow_removal_monthly", "snow-removal", "Snow Removal"),
    ("pest_control_monthly", "pest-control", "Pest Control"),
    ("pool_maintenance_monthly", "pool-maintenance", "Pool Maintenance"),
    ("alarm_monitoring_monthly", "alarm-monitoring", "Alarm Monitoring"),
    ("other_expenses_monthly", "other-expenses", "Other"),
)

STRUCTURED_DUPLICATE_CATEGORIES = ("property_tax", "insurance")
LOAN_DESCRIPTION_KEYWORDS = ("loan", "mortgage", "heloc")


@dataclass
class ExpenseLineItem:
    """One labelled monthly expense."""

    id: str
    label: str
    amount: float


def fixed_expenses_from_structured(expenses: Optional[OperatingExpenses]) -> float:
    """
    Sum structured fixed expenses as a monthly figure.

    Annual fields are divided by 12. Management is not included here.
    """
    if expenses is None:
        return 0.0

    total = sum(to_amount(getattr(expenses, name)) / 12 for name, _, _ in ANNUAL_EXPENSE_FIELDS)
    total += sum(to_amount(getattr(expenses, name)) for name, _, _ in MONTHLY_EXPENSE_FIELDS)
    return total


def _flat_fee(expenses: OperatingExpenses) -> Optional[float]:
    fee = to_optional_amount(expenses.management_flat_fee)
    return fee if fee else None


def _management_rate(expenses: OperatingExpenses) -> Optional[float]:
    rate = to_optional_amount(expenses.management_rate)
    return rate if rate else None


def has_management_expense(expenses: Optional[OperatingExpenses]) -> bool:
    """Whether structured data configures a management fee of either kind."""
    if expenses is None:
        return False
    return _flat_fee(expenses) is not None or _management_rate(expenses) is not None


def management_fee(expenses: Optional[OperatingExpenses], gross_income: float) -> float:
    """
    Calculate the monthly management fee.

    A flat fee wins when configured; otherwise the rate is applied to
    gross income. Only one of the two is ever applied.
    """
    if expenses is None:
        return 0.0

    flat_fee = _flat_fee(expenses)
    if flat_fee is not None:
        return flat_fee

    rate = _management_rate(expenses)
    if rate is not None and gross_income > 0:
        return gross_income * rate

    return 0.0


def is_loan_payment(transaction: Transaction) -> bool:
    """Loan payments are financing costs, not operating expenses."""
    if (transaction.category or "").lower() != "other":
        return False
    if (transaction.subcategory or "").lower() == "loan_payment":
        return True
    description = (transaction.description or "").lower()
    return any(keyword in description for keyword in LOAN_DESCRIPTION_KEYWORDS)


def is_duplicate_of_structured(
    transaction: Transaction,
    expenses: Optional[OperatingExpenses],
    has_management: bool,
) -> bool:
    """
    Decide whether a recurring expense transaction overlaps structured data.

    A transaction is dropped from the fixed-expense total when:
    - it is a management charge and structured management is configured,
    - it is a loan, mortgage or HELOC payment, or
    - it is property tax or insurance and a structured expense record exists
      (structured annual figures are authoritative for those categories).
    """
    category = (transaction.category or "").lower()

    if has_management and category == "management":
        return True
    if is_loan_payment(transaction):
        return True
    if expenses is not None and category in STRUCTURED_DUPLICATE_CATEGORIES:
        return True
    return False


def is_recurring_monthly_expense(transaction: Transaction) -> bool:
    return (
        transaction.is_expense
        and transaction.is_recurring
        and transaction.recurrence_frequency == "monthly"
    )


def recurring_expenses_from_transactions(
    transactions: Optional[List[Transaction]],
    expenses: Optional[OperatingExpenses],
    has_management: bool,
) -> Dict[str, float]:
    """
    Total recurring monthly expense transactions per category.

    One-off transactions are ignored, as are those the double-count
    policy attributes to structured data.
    """
    totals: Dict[str, float] = {}

    for transaction in active_transactions(transactions):
        if not is_recurring_monthly_expense(transaction):
            continue
        if is_duplicate_of_structured(transaction, expenses, has_management):
            logger.debug(
                "Skipping recurring %s transaction covered by structured data",
                transaction.category,
            )
            continue
        category = transaction.category or "Other"
        totals[category] = totals.get(category, 0.0) + to_amount(transaction.amount)

    return totals


def total_fixed_expenses(
    expenses: Optional[OperatingExpenses],
    transactions: Optional[List[Transaction]],
    gross_income: float,
) -> float:
    """
    Calculate total monthly fixed expenses.

    Structured expenses + management fee + recurring monthly expense
    transactions that survive the double-count policy.
    """
    total = fixed_expenses_from_structured(expenses)
    total += management_fee(expenses, gross_income)

    recurring = recurring_expenses_from_transactions(
        transactions, expenses, has_management_expense(expenses)
    )
    total += sum(recurring.values())

    return total


def has_operating_expenses(expenses: Optional[OperatingExpenses], total: float) -> bool:
    """
    Whether operating expenses count as configured.

    True when the computed total is positive or when property tax or
    insurance is set, even if it happens to be zero.
    """
    if total > 0:
        return True
    if expenses is None:
        return False
    return (
        to_optional_amount(expenses.property_tax_annual) is not None
        or to_optional_amount(expenses.insurance_annual) is not None
    )


def fixed_expense_line_items(
    expenses: Optional[OperatingExpenses],
    transactions: Optional[List[Transaction]],
    gross_income: float,
) -> List[ExpenseLineItem]:
    """
    Break fixed expenses into labelled monthly line items.

    Only configured (non-zero) structured fields appear. Recurring
    transactions are listed individually under their category.
    """
    items: List[ExpenseLineItem] = []

    if expenses is not None:
        for name, item_id, label in ANNUAL_EXPENSE_FIELDS:
            amount = to_amount(getattr(expenses, name))
            if amount:
                items.append(ExpenseLineItem(item_id, label, amount / 12))

        for name, item_id, label in MONTHLY_EXPENSE_FIELDS:
            amount = to_amount(getattr(expenses, name))
            if not amount:
                continue
            if name == "other_expenses_monthly" and expenses.other_expenses_description:
                label = expenses.other_expenses_description
            items.append(ExpenseLineItem(item_id, label, amount))

        fee = management_fee(expenses, gross_income)
        if fee:
            items.append(ExpenseLineItem("management", "Management", fee))

    has_management = has_management_expense(expenses)
    for index, transaction in enumerate(active_transactions(transactions)):
        if not is_recurring_monthly_expense(transaction):
            continue
        if is_duplicate_of_structured(transaction, expenses, has_management):
            continue
        items.append(
            ExpenseLineItem(
                transaction.id or f"transaction-{index}",
                transaction.category or "Other",
                to_amount(transaction.amount),
            )
        )

    return items
