"""
Input Records

Plain structured records handed to the engine by its callers. The engine
only reads these; amounts may be numbers or string-encoded decimals as
stored, and any field may be missing.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Union

from app.calculations.numeric import Amount

DateLike = Optional[Union[str, date]]


@dataclass
class RentalIncome:
    """Structured monthly rental income for a property."""

    monthly_rent: Amount = None
    other_income_monthly: Amount = None
    parking_income_monthly: Amount = None
    laundry_income_monthly: Amount = None
    pet_rent_monthly: Amount = None
    storage_income_monthly: Amount = None
    utility_reimbursement_monthly: Amount = None


@dataclass
class OperatingExpenses:
    """Structured operating expenses. Rates are decimals (0.05 = 5%)."""

    # Annual
    property_tax_annual: Amount = None
    insurance_annual: Amount = None

    # Monthly
    hoa_monthly: Amount = None
    water_sewer_monthly: Amount = None
    trash_monthly: Amount = None
    electric_monthly: Amount = None
    gas_monthly: Amount = None
    internet_monthly: Amount = None
    lawn_care_monthly: Amount = None
    snow_removal_monthly: Amount = None
    pest_control_monthly: Amount = None
    pool_maintenance_monthly: Amount = None
    alarm_monitoring_monthly: Amount = None
    other_expenses_monthly: Amount = None
    other_expenses_description: Optional[str] = None

    # Management (flat fee takes precedence over rate)
    management_flat_fee: Amount = None
    management_rate: Amount = None

    # Reserves
    capex_rate: Amount = None
    maintenance_rate: Amount = None
    vacancy_rate: Amount = None


@dataclass
class Loan:
    """A loan secured by the property. interest_rate is a decimal (0.065)."""

    status: str = "active"
    is_primary: bool = False
    current_balance: Amount = None
    interest_rate: Amount = None
    term_months: Optional[int] = None
    monthly_principal_interest: Amount = None
    monthly_escrow: Amount = None
    total_monthly_payment: Amount = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"


@dataclass
class Transaction:
    """A single income or expense ledger entry."""

    type: str
    amount: Amount
    transaction_date: DateLike = None
    is_excluded: bool = False
    is_recurring: bool = False
    recurrence_frequency: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    description: Optional[str] = None
    id: Optional[str] = None

    @property
    def is_income(self) -> bool:
        return self.type == "income"

    @property
    def is_expense(self) -> bool:
        return self.type == "expense"


@dataclass
class Acquisition:
    """Purchase details for a property."""

    purchase_price: Amount = None
    closing_costs: Amount = None
    down_payment_amount: Amount = None
    purchase_date: DateLike = None
    current_value: Amount = None


@dataclass
class PropertyFinancials:
    """
    Everything the engine needs about one property.

    `transactions` is None when the caller did not load transaction
    history, which is different from an empty history.
    """

    property_type: Optional[str] = None
    rental_income: Optional[RentalIncome] = None
    operating_expenses: Optional[OperatingExpenses] = None
    loans: List[Loan] = field(default_factory=list)
    transactions: Optional[List[Transaction]] = None
    acquisition: Optional[Acquisition] = None
    current_value: Amount = None


def active_transactions(transactions: Optional[List[Transaction]]) -> List[Transaction]:
    """Transactions that participate in aggregates (excluded ones never do)."""
    return [t for t in (transactions or []) if not t.is_excluded]
