"""
Debt Service Calculations

Monthly payment and debt service across a property's loans.
Only active loans participate.
"""

import logging
import math
from typing import List

from app.calculations.numeric import to_amount, to_optional_amount
from app.calculations.records import Loan

logger = logging.getLogger(__name__)

# Beyond e**40, growth / (growth - 1) equals 1 in float arithmetic
_SATURATED_GROWTH_EXPONENT = 40.0


def monthly_principal_interest(
    principal: float, annual_rate_percent: float, term_months: int
) -> float:
    """
    Calculate monthly principal and interest payment.

    Standard fixed-rate amortization (Excel PMT).

    Args:
        principal: Loan principal amount
        annual_rate_percent: Annual interest rate as percentage (e.g., 6.5 for 6.5%)
        term_months: Loan term in months (e.g., 360 for 30 years)

    Returns:
        Monthly P&I payment (positive number)
    """
    if principal <= 0 or term_months <= 0:
        return 0.0
    if annual_rate_percent == 0:
        return principal / term_months

    monthly_rate = annual_rate_percent / 100 / 12
    if monthly_rate > 0 and term_months * math.log1p(monthly_rate) > _SATURATED_GROWTH_EXPONENT:
        # interest only; the principal share is negligible
        return principal * monthly_rate

    growth = (1 + monthly_rate) ** term_months
    if growth == 1:
        return principal / term_months

    return principal * monthly_rate * growth / (growth - 1)


def loan_principal_interest(loan: Loan) -> float:
    """
    Monthly P&I for a loan.

    Uses the stored payment when known, otherwise derives it from
    balance, rate and term. Missing inputs give 0.
    """
    known = to_optional_amount(loan.monthly_principal_interest)
    if known is not None:
        return known

    balance = to_amount(loan.current_balance)
    rate = to_optional_amount(loan.interest_rate)
    if balance <= 0 or rate is None or not loan.term_months:
        return 0.0

    derived = monthly_principal_interest(balance, rate * 100, loan.term_months)
    logger.debug("Derived P&I %.2f from loan terms", derived)
    return derived


def loan_monthly_payment(loan: Loan) -> float:
    """Total monthly payment if known, otherwise P&I plus escrow."""
    total = to_optional_amount(loan.total_monthly_payment)
    if total:
        return total
    return loan_principal_interest(loan) + to_amount(loan.monthly_escrow)


def total_debt_service(loans: List[Loan]) -> float:
    """Sum monthly payments over active loans."""
    return sum(loan_monthly_payment(loan) for loan in loans or [] if loan.is_active)


def total_loan_balance(loans: List[Loan]) -> float:
    """Sum current balance over active loans."""
    return sum(to_amount(loan.current_balance) for loan in loans or [] if loan.is_active)


def primary_loan_interest_rate(loans: List[Loan]) -> float:
    """
    Interest rate of the active primary loan.

    Returns:
        Rate as percentage (e.g., 4.5 for 4.5%), 0 when there is no
        active primary loan
    """
    for loan in loans or []:
        if loan.is_active and loan.is_primary:
            return to_amount(loan.interest_rate) * 100
    return 0.0
