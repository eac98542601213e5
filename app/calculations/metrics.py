"""
Property Metrics

Headline dashboard metrics (equity, monthly cash flow, cap rate, LTV),
each tagged with a status describing how complete its inputs were.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from app.calculations.cashflow import operating_summary
from app.calculations.debt import total_loan_balance
from app.calculations.numeric import safe_divide, to_optional_amount
from app.calculations.records import Acquisition, PropertyFinancials
from app.calculations.results import MetricWithStatus

PROPERTY_UNAVAILABLE = "Property data not available"
RENT_NOT_SET = "Monthly rent not set"
EXPENSES_NOT_CONFIGURED = "Operating expenses not configured"
REQUIRES_CURRENT_VALUE = "Requires current property value"
REQUIRES_RENTAL_INCOME = "Requires rental income data"
REQUIRES_VALUE_SIGNAL = "Requires purchase price or current value"
USING_PURCHASE_PRICE = "Using purchase price (current value unavailable)"
NO_ACTIVE_LOANS = "No active loans"


@dataclass
class PropertyMetrics:
    equity: MetricWithStatus
    monthly_cash_flow: MetricWithStatus
    cap_rate: MetricWithStatus
    ltv: MetricWithStatus

    def to_dict(self) -> Dict:
        return {
            "equity": self.equity.to_dict(),
            "monthly_cash_flow": self.monthly_cash_flow.to_dict(),
            "cap_rate": self.cap_rate.to_dict(),
            "ltv": self.ltv.to_dict(),
        }


def resolve_current_value(financials: PropertyFinancials) -> Optional[float]:
    """Valuation first, then the value recorded at acquisition."""
    value = to_optional_amount(financials.current_value)
    if value is None and financials.acquisition is not None:
        value = to_optional_amount(financials.acquisition.current_value)
    return value


def _equity(financials: PropertyFinancials, loan_balance: float) -> MetricWithStatus:
    current_value = resolve_current_value(financials)
    if current_value is not None and current_value > 0:
        return MetricWithStatus.success(current_value - loan_balance)

    purchase_price = (
        to_optional_amount(financials.acquisition.purchase_price)
        if financials.acquisition is not None
        else None
    )
    if purchase_price is not None and purchase_price > 0:
        return MetricWithStatus.incomplete(purchase_price - loan_balance, USING_PURCHASE_PRICE)

    return MetricWithStatus.warning(None, REQUIRES_VALUE_SIGNAL)


def property_metrics(financials: Optional[PropertyFinancials]) -> PropertyMetrics:
    """
    Calculate headline metrics with status.

    Cash flow is `warning` when no income exists and `incomplete` when
    income exists but operating expenses are not configured, so an
    inflated cash flow is never reported as verified.
    """
    if financials is None:
        return PropertyMetrics(
            equity=MetricWithStatus.error(None, PROPERTY_UNAVAILABLE),
            monthly_cash_flow=MetricWithStatus.error(0.0, PROPERTY_UNAVAILABLE),
            cap_rate=MetricWithStatus.error(None, PROPERTY_UNAVAILABLE),
            ltv=MetricWithStatus.error(None, PROPERTY_UNAVAILABLE),
        )

    summary = operating_summary(financials)
    loan_balance = total_loan_balance(financials.loans)
    current_value = resolve_current_value(financials)
    has_income = summary.gross_income > 0

    if not has_income:
        cash_flow = MetricWithStatus.warning(summary.cash_flow, RENT_NOT_SET)
    elif not summary.has_operating_expenses:
        cash_flow = MetricWithStatus.incomplete(summary.cash_flow, EXPENSES_NOT_CONFIGURED)
    else:
        cash_flow = MetricWithStatus.success(summary.cash_flow)

    if current_value is None or current_value <= 0:
        cap_rate = MetricWithStatus.warning(None, REQUIRES_CURRENT_VALUE)
        ltv = MetricWithStatus.warning(None, REQUIRES_CURRENT_VALUE)
    else:
        cap_rate_value = summary.noi * 12 / current_value * 100
        if not has_income:
            cap_rate = MetricWithStatus.warning(None, REQUIRES_RENTAL_INCOME)
        elif not summary.has_operating_expenses:
            cap_rate = MetricWithStatus.incomplete(cap_rate_value, EXPENSES_NOT_CONFIGURED)
        else:
            cap_rate = MetricWithStatus.success(cap_rate_value)

        ltv = MetricWithStatus.success(
            loan_balance / current_value * 100,
            NO_ACTIVE_LOANS if loan_balance == 0 else None,
        )

    return PropertyMetrics(
        equity=_equity(financials, loan_balance),
        monthly_cash_flow=cash_flow,
        cap_rate=cap_rate,
        ltv=ltv,
    )


# =============================================================================
# ACQUISITION
# =============================================================================


@dataclass
class AcquisitionMetrics:
    purchase_price: Optional[float]
    closing_costs: Optional[float]
    current_value: Optional[float]
    down_payment_amount: Optional[float]
    current_basis: Optional[float]
    equity_velocity: Optional[float]
    cash_in_deal: Optional[float]
    closing_costs_percentage: Optional[float]
    unrealized_gain: Optional[float]
    has_acquisition_data: bool


def acquisition_metrics(
    acquisition: Optional[Acquisition], current_value: Optional[float] = None
) -> AcquisitionMetrics:
    """
    Derive acquisition figures.

    Equity velocity is the percentage change from purchase price to
    current value. Every ratio is None when its denominator is missing.
    """
    if acquisition is None:
        return AcquisitionMetrics(
            purchase_price=None,
            closing_costs=None,
            current_value=current_value,
            down_payment_amount=None,
            current_basis=None,
            equity_velocity=None,
            cash_in_deal=None,
            closing_costs_percentage=None,
            unrealized_gain=None,
            has_acquisition_data=False,
        )

    purchase_price = to_optional_amount(acquisition.purchase_price) or None
    closing_costs = to_optional_amount(acquisition.closing_costs) or None
    down_payment = to_optional_amount(acquisition.down_payment_amount) or None
    if current_value is None:
        current_value = to_optional_amount(acquisition.current_value) or None

    current_basis = (
        purchase_price + closing_costs if purchase_price and closing_costs else None
    )

    equity_velocity = None
    unrealized_gain = None
    if purchase_price and current_value:
        ratio = safe_divide(current_value - purchase_price, purchase_price)
        equity_velocity = ratio * 100 if ratio is not None else None
        unrealized_gain = current_value - purchase_price

    if down_payment and closing_costs:
        cash_in_deal = down_payment + closing_costs
    else:
        cash_in_deal = down_payment or closing_costs

    closing_pct = None
    if purchase_price and closing_costs:
        closing_pct = closing_costs / purchase_price * 100

    return AcquisitionMetrics(
        purchase_price=purchase_price,
        closing_costs=closing_costs,
        current_value=current_value,
        down_payment_amount=down_payment,
        current_basis=current_basis,
        equity_velocity=equity_velocity,
        cash_in_deal=cash_in_deal,
        closing_costs_percentage=closing_pct,
        unrealized_gain=unrealized_gain,
        has_acquisition_data=purchase_price is not None or acquisition.purchase_date is not None,
    )
