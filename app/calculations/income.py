"""
Income Calculations

Gross monthly income from structured rental income and/or income
transactions. Structured data is preferred; transaction history is the
fallback for properties whose rent has not been configured.
"""

import logging
from typing import List, Optional

from app.calculations.numeric import to_amount
from app.calculations.records import RentalIncome, Transaction, active_transactions
from app.calculations.results import DataSource, Derived, resolve_source, value_or_zero

logger = logging.getLogger(__name__)

INCOME_FIELDS = (
    "monthly_rent",
    "other_income_monthly",
    "parking_income_monthly",
    "laundry_income_monthly",
    "pet_rent_monthly",
    "storage_income_monthly",
    "utility_reimbursement_monthly",
)


def gross_income_from_structured(rental_income: Optional[RentalIncome]) -> float:
    """Sum all structured monthly income fields. Missing fields count as zero."""
    if rental_income is None:
        return 0.0
    return sum(to_amount(getattr(rental_income, name)) for name in INCOME_FIELDS)


def gross_income_from_transactions(transactions: Optional[List[Transaction]]) -> float:
    """Sum non-excluded income transactions."""
    return sum(
        to_amount(t.amount) for t in active_transactions(transactions) if t.is_income
    )


def income_source(
    rental_income: Optional[RentalIncome],
    transactions: Optional[List[Transaction]],
) -> DataSource:
    """Resolve which track supplies gross income."""
    structured = (
        gross_income_from_structured(rental_income) if rental_income is not None else None
    )
    derived = (
        gross_income_from_transactions(transactions) if transactions is not None else None
    )
    source = resolve_source(structured, derived)
    if isinstance(source, Derived):
        logger.debug("Gross income falling back to transactions: %.2f", source.value)
    return source


def gross_income(
    rental_income: Optional[RentalIncome],
    transactions: Optional[List[Transaction]],
) -> float:
    """
    Calculate gross monthly income.

    Args:
        rental_income: Structured rental income record, or None
        transactions: Property transactions, or None if not loaded

    Returns:
        Structured income sum, or the transaction income sum when structured
        data is absent or exactly zero
    """
    return value_or_zero(income_source(rental_income, transactions))
