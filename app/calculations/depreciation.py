"""
Depreciation & Tax Shield Calculations

IRS straight-line depreciation for rental property:
- 27.5-year (residential) and 39-year (commercial) recovery periods
- Mid-month convention for the first and final partial years
- Accumulated depreciation and remaining basis over time
- Tax shield value at a marginal tax rate
- Paper loss vs actual cash flow
- Cost segregation potential (heuristic)
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union

from app.calculations.assumptions import DEFAULT_ASSUMPTIONS, TaxAssumptions
from app.calculations.numeric import parse_local_date, round_currency, round_dollars

logger = logging.getLogger(__name__)

DateInput = Optional[Union[str, date]]

# Guards ceil() against float noise such as 38.000000000001
_EPSILON = 1e-9


@dataclass
class CostBasis:
    purchase_price: float
    closing_costs: float
    initial_improvements: float
    total_cost_basis: float
    land_value: float
    depreciable_basis: float


@dataclass
class DepreciationScheduleItem:
    year_number: int
    year: int
    months_depreciated: int
    beginning_basis: float
    depreciation: float
    accumulated_depreciation: float
    remaining_basis: float


@dataclass
class DepreciationSummary:
    annual_depreciation: float
    monthly_depreciation: float
    accumulated_depreciation: float
    remaining_basis: float
    years_completed: int
    years_remaining: int
    total_depreciable_years: float


@dataclass
class TaxShield:
    annual_tax_shield: float
    monthly_tax_shield: float
    total_tax_shield_to_date: float
    marginal_tax_rate: float


@dataclass
class PaperLossComparison:
    actual_cash_flow: float
    paper_loss: float
    taxable_income: float
    tax_savings: float
    effective_cash_flow: float


@dataclass
class CostSegregationPotential:
    percentage: float
    level: str
    potential_value: float


# =============================================================================
# SCHEDULE SELECTION & COST BASIS
# =============================================================================


def _normalize_type(property_type: str) -> str:
    return property_type.strip().lower().replace("_", "-")


def depreciation_years(
    property_type: Optional[str], assumptions: TaxAssumptions = DEFAULT_ASSUMPTIONS
) -> float:
    """
    Recovery period for a property type.

    Residential types (SFR, duplex through fourplex, condo, townhouse) use
    27.5 years; multifamily 5+ and commercial use 39. Unknown or missing
    types default to residential.
    """
    if not property_type or not property_type.strip():
        return assumptions.residential_years

    residential = {_normalize_type(t) for t in assumptions.residential_property_types}
    if _normalize_type(property_type) in residential:
        return assumptions.residential_years
    return assumptions.commercial_years


def depreciation_type(
    years: float, assumptions: TaxAssumptions = DEFAULT_ASSUMPTIONS
) -> str:
    """'residential' or 'commercial' for a recovery period."""
    return "residential" if years == assumptions.residential_years else "commercial"


def calculate_cost_basis(
    purchase_price: float,
    closing_costs: float = 0.0,
    initial_improvements: float = 0.0,
    land_value: Optional[float] = None,
    assumptions: TaxAssumptions = DEFAULT_ASSUMPTIONS,
) -> CostBasis:
    """
    Calculate the depreciable basis.

    Total basis = purchase price + closing costs + improvements.
    Land is never depreciable; when its value is unknown it is estimated
    at the default land ratio (20%) of total basis.
    """
    total = purchase_price + closing_costs + initial_improvements
    if land_value is None:
        land_value = total * assumptions.land_value_ratio

    return CostBasis(
        purchase_price=purchase_price,
        closing_costs=closing_costs,
        initial_improvements=initial_improvements,
        total_cost_basis=total,
        land_value=land_value,
        depreciable_basis=max(0.0, total - land_value),
    )


def annual_depreciation(
    depreciable_basis: float, years: float = DEFAULT_ASSUMPTIONS.residential_years
) -> float:
    """Full-year straight-line depreciation."""
    if depreciable_basis <= 0 or years <= 0:
        return 0.0
    return depreciable_basis / years


def monthly_depreciation(
    depreciable_basis: float, years: float = DEFAULT_ASSUMPTIONS.residential_years
) -> float:
    return annual_depreciation(depreciable_basis, years) / 12


# =============================================================================
# MID-MONTH CONVENTION
# =============================================================================


def first_year_fraction(placed_in_service_month: int) -> float:
    """
    Share of a full year's depreciation allowed in the first tax year.

    Property is treated as placed in service mid-month, so January
    earns 11.5/12 and December 0.5/12. Invalid months get a full year.
    """
    if placed_in_service_month < 1 or placed_in_service_month > 12:
        return 1.0
    return (12.5 - placed_in_service_month) / 12


def last_year_fraction(placed_in_service_month: int) -> float:
    """Complement of the first-year fraction."""
    return 1.0 - first_year_fraction(placed_in_service_month)


def recovery_year_count(years: float, placed_in_service_month: int = 1) -> int:
    """
    Number of tax years the schedule spans.

    The first year covers the first-year fraction; full years follow
    until the final year picks up what remains of the recovery period.
    39 years placed in January spans 40 tax years; 27.5 years spans
    28 (January-June) or 29 (July-December).
    """
    if years <= 0:
        return 0
    after_first = years - first_year_fraction(placed_in_service_month)
    if after_first <= _EPSILON:
        return 1
    return 1 + math.ceil(after_first - _EPSILON)


def final_year_fraction(years: float, placed_in_service_month: int = 1) -> float:
    """
    Share of a full year's depreciation taken in the final tax year.

    Equals last_year_fraction() for whole-year recovery periods; for
    27.5 years it also carries the half year.
    """
    count = recovery_year_count(years, placed_in_service_month)
    if count <= 1:
        return 0.0
    after_first = years - first_year_fraction(placed_in_service_month)
    return after_first - (count - 2)


def year_depreciation(
    depreciable_basis: float,
    years: float,
    year_number: int,
    placed_in_service_month: int = 1,
    accumulated_before: float = 0.0,
) -> float:
    """
    Depreciation for one tax year of the schedule.

    Args:
        depreciable_basis: Basis being depreciated
        years: Recovery period (27.5 or 39)
        year_number: Which tax year (1-indexed)
        placed_in_service_month: Month placed in service (1-12)
        accumulated_before: Depreciation taken in earlier years

    Returns:
        Depreciation for the year, never more than the basis left
    """
    if depreciable_basis <= 0 or year_number <= 0:
        return 0.0

    remaining = depreciable_basis - accumulated_before
    if remaining <= 0:
        return 0.0

    annual = annual_depreciation(depreciable_basis, years)
    final_year = recovery_year_count(years, placed_in_service_month)

    if year_number == 1:
        return min(annual * first_year_fraction(placed_in_service_month), remaining)

    if year_number == final_year:
        return min(remaining, annual * final_year_fraction(years, placed_in_service_month))

    if year_number > final_year:
        return 0.0

    return min(annual, remaining)


def _months_in_service(year_number: int, final_year: int, month: int, final_fraction: float) -> int:
    if year_number == 1:
        return 13 - month if 1 <= month <= 12 else 12
    if year_number == final_year:
        # calendar months touched, e.g. 6.5 months of service spans 7
        return math.ceil(final_fraction * 12 - _EPSILON)
    return 12


def generate_schedule(
    depreciable_basis: float,
    years: float = DEFAULT_ASSUMPTIONS.residential_years,
    placed_in_service_date: DateInput = None,
    as_of: Optional[date] = None,
) -> List[DepreciationScheduleItem]:
    """
    Generate the full depreciation schedule.

    Without an in-service date the schedule starts in January of the
    `as_of` year (today by default).

    Returns:
        One row per tax year; the depreciation column sums to the basis
    """
    if depreciable_basis <= 0 or years <= 0:
        return []

    in_service = parse_local_date(placed_in_service_date)
    if in_service is not None:
        month = in_service.month
        start_year = in_service.year
    else:
        month = 1
        start_year = (as_of or date.today()).year
        logger.debug("No placed-in-service date, schedule starts January %d", start_year)

    final_year = recovery_year_count(years, month)
    final_fraction = final_year_fraction(years, month)

    schedule = []
    accumulated = 0.0

    for year_number in range(1, final_year + 1):
        depreciation = year_depreciation(
            depreciable_basis, years, year_number, month, accumulated
        )
        if depreciation <= 0:
            break

        beginning = depreciable_basis - accumulated
        accumulated += depreciation

        schedule.append(
            DepreciationScheduleItem(
                year_number=year_number,
                year=start_year + year_number - 1,
                months_depreciated=_months_in_service(
                    year_number, final_year, month, final_fraction
                ),
                beginning_basis=round_currency(beginning),
                depreciation=round_currency(depreciation),
                accumulated_depreciation=round_currency(accumulated),
                remaining_basis=round_currency(max(0.0, depreciable_basis - accumulated)),
            )
        )

    return schedule


def depreciation_summary(
    depreciable_basis: float,
    years: float = DEFAULT_ASSUMPTIONS.residential_years,
    placed_in_service_date: DateInput = None,
    as_of: Optional[date] = None,
) -> Optional[DepreciationSummary]:
    """
    Depreciation state as of a date.

    Past tax years count in full; the current tax year counts
    as_of.month / 12 of its scheduled amount.

    Returns:
        Summary, or None without a basis or in-service date
    """
    in_service = parse_local_date(placed_in_service_date)
    if in_service is None or depreciable_basis <= 0:
        return None

    as_of = as_of or date.today()
    schedule = generate_schedule(depreciable_basis, years, in_service, as_of)

    accumulated = 0.0
    years_completed = 0
    for item in schedule:
        if item.year < as_of.year:
            accumulated += item.depreciation
            years_completed += 1
        elif item.year == as_of.year:
            accumulated += item.depreciation / 12 * as_of.month

    total_years = recovery_year_count(years, in_service.month)

    return DepreciationSummary(
        annual_depreciation=annual_depreciation(depreciable_basis, years),
        monthly_depreciation=monthly_depreciation(depreciable_basis, years),
        accumulated_depreciation=round_currency(accumulated),
        remaining_basis=round_currency(depreciable_basis - accumulated),
        years_completed=years_completed,
        years_remaining=max(0, total_years - years_completed),
        total_depreciable_years=years,
    )


def unclaimed_depreciation(
    purchase_date: DateInput,
    depreciable_basis: Optional[float],
    years: float = DEFAULT_ASSUMPTIONS.residential_years,
    as_of: Optional[date] = None,
    assumptions: TaxAssumptions = DEFAULT_ASSUMPTIONS,
) -> Optional[float]:
    """
    Approximate depreciation accrued since purchase.

    Months owned are approximated as days / 30.44 rather than counted on
    the calendar, so this is less precise than depreciation_summary().
    Kept for existing callers.

    Returns:
        Whole dollars, 0 for a future purchase date, or None when the
        date or basis is missing
    """
    purchased = parse_local_date(purchase_date)
    if purchased is None or depreciable_basis is None:
        return None

    as_of = as_of or date.today()
    if purchased > as_of:
        return 0.0
    if years <= 0:
        return 0.0

    months_owned = (as_of - purchased).days / assumptions.average_days_per_month
    return round_dollars(depreciable_basis / years * (months_owned / 12))


# =============================================================================
# TAX SHIELD
# =============================================================================


def tax_shield(
    annual_depreciation_amount: float,
    marginal_tax_rate: Optional[float] = None,
    accumulated_depreciation: float = 0.0,
    assumptions: TaxAssumptions = DEFAULT_ASSUMPTIONS,
) -> TaxShield:
    """
    Tax savings produced by depreciation.

    Args:
        annual_depreciation_amount: Annual depreciation
        marginal_tax_rate: Decimal rate, defaults to 24%
        accumulated_depreciation: Depreciation claimed to date
    """
    if marginal_tax_rate is None:
        marginal_tax_rate = assumptions.marginal_tax_rate

    annual = annual_depreciation_amount * marginal_tax_rate

    return TaxShield(
        annual_tax_shield=round_currency(annual),
        monthly_tax_shield=round_currency(annual / 12),
        total_tax_shield_to_date=round_currency(accumulated_depreciation * marginal_tax_rate),
        marginal_tax_rate=marginal_tax_rate,
    )


def paper_loss_comparison(
    annual_cash_flow: float,
    annual_depreciation_amount: float,
    marginal_tax_rate: Optional[float] = None,
    assumptions: TaxAssumptions = DEFAULT_ASSUMPTIONS,
) -> PaperLossComparison:
    """
    Compare cash flow with taxable income after depreciation.

    Depreciation is a non-cash deduction: taxable income can go negative
    (a paper loss) while the tax savings add to effective cash flow.
    """
    if marginal_tax_rate is None:
        marginal_tax_rate = assumptions.marginal_tax_rate

    tax_savings = annual_depreciation_amount * marginal_tax_rate

    return PaperLossComparison(
        actual_cash_flow=round_currency(annual_cash_flow),
        paper_loss=round_currency(annual_depreciation_amount),
        taxable_income=round_currency(annual_cash_flow - annual_depreciation_amount),
        tax_savings=round_currency(tax_savings),
        effective_cash_flow=round_currency(annual_cash_flow + tax_savings),
    )


# =============================================================================
# COST SEGREGATION
# =============================================================================


def cost_seg_potential(
    depreciable_basis: Optional[float],
    assumptions: TaxAssumptions = DEFAULT_ASSUMPTIONS,
) -> Optional[CostSegregationPotential]:
    """
    Estimate how much basis a cost segregation study could accelerate.

    This is a bucketed heuristic on basis size (35% from $500k, 30% from
    $200k, else 25%), not an engineering estimate.

    Returns:
        Percentage, level and dollar amount, or None without a basis
    """
    if depreciable_basis is None:
        return None

    percentage = assumptions.cost_seg_tiers[-1][1]
    for threshold, tier_percentage in assumptions.cost_seg_tiers:
        if depreciable_basis >= threshold:
            percentage = tier_percentage
            break

    level = assumptions.cost_seg_levels[-1][1]
    for minimum, tier_level in assumptions.cost_seg_levels:
        if percentage >= minimum:
            level = tier_level
            break

    return CostSegregationPotential(
        percentage=percentage,
        level=level,
        potential_value=round_dollars(depreciable_basis * percentage / 100),
    )


def cost_seg_first_year_benefit(
    amount_5_year: float = 0.0,
    amount_7_year: float = 0.0,
    amount_15_year: float = 0.0,
    bonus_percent: float = 0.0,
    marginal_tax_rate: Optional[float] = None,
    assumptions: TaxAssumptions = DEFAULT_ASSUMPTIONS,
) -> float:
    """First-year tax benefit of bonus depreciation on reclassified components."""
    if marginal_tax_rate is None:
        marginal_tax_rate = assumptions.marginal_tax_rate

    reclassified = amount_5_year + amount_7_year + amount_15_year
    return round_currency(reclassified * bonus_percent * marginal_tax_rate)
