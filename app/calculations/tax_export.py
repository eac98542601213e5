"""
CPA Depreciation Export

Builds the depreciation package handed to a tax preparer and renders it
as CSV. Section order and labels are consumed by downstream tools and
must not change.
"""

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from app.calculations.assumptions import DEFAULT_ASSUMPTIONS, TaxAssumptions
from app.calculations.depreciation import (
    CostBasis,
    DepreciationScheduleItem,
    DepreciationSummary,
    DateInput,
    calculate_cost_basis,
    depreciation_summary,
    depreciation_type,
    depreciation_years,
    generate_schedule,
)
from app.calculations.numeric import parse_local_date

SCHEDULE_COLUMNS = [
    "Year",
    "Months",
    "Beginning Basis",
    "Depreciation",
    "Accumulated Depreciation",
    "Remaining Basis",
]


@dataclass
class DepreciationExport:
    property_address: str
    property_type: str
    depreciation_type: str
    depreciation_years: float
    placed_in_service_date: str
    cost_basis: CostBasis
    schedule: List[DepreciationScheduleItem]
    summary: Optional[DepreciationSummary]
    tax_year_current: int
    current_year_depreciation: float
    generated_date: str


def build_export_data(
    property_address: str,
    property_type: str,
    purchase_price: float,
    placed_in_service_date: DateInput,
    closing_costs: float = 0.0,
    initial_improvements: float = 0.0,
    land_value: Optional[float] = None,
    as_of: Optional[date] = None,
    generated_at: Optional[datetime] = None,
    assumptions: TaxAssumptions = DEFAULT_ASSUMPTIONS,
) -> DepreciationExport:
    """
    Assemble everything a CPA needs for the property's depreciation.

    Args:
        property_address: Full property address
        property_type: Property type (SFR, Duplex, etc.)
        purchase_price: Purchase price
        placed_in_service_date: Date the property was placed in service
        closing_costs: Capitalized closing costs
        initial_improvements: Improvements made before renting
        land_value: Land value, estimated when None
        as_of: Reference date for the summary and current tax year

    Raises:
        ValueError: If the placed-in-service date cannot be parsed
    """
    in_service = parse_local_date(placed_in_service_date, strict=True)
    as_of = as_of or date.today()
    generated_at = generated_at or datetime.now()

    years = depreciation_years(property_type, assumptions)
    basis = calculate_cost_basis(
        purchase_price, closing_costs, initial_improvements, land_value, assumptions
    )
    schedule = generate_schedule(basis.depreciable_basis, years, in_service, as_of)
    summary = depreciation_summary(basis.depreciable_basis, years, in_service, as_of)

    current_year_depreciation = next(
        (item.depreciation for item in schedule if item.year == as_of.year), 0.0
    )

    return DepreciationExport(
        property_address=property_address,
        property_type=property_type,
        depreciation_type=depreciation_type(years, assumptions),
        depreciation_years=years,
        placed_in_service_date=in_service.isoformat(),
        cost_basis=basis,
        schedule=schedule,
        summary=summary,
        tax_year_current=as_of.year,
        current_year_depreciation=current_year_depreciation,
        generated_date=generated_at.isoformat(),
    )


def format_money(value: float) -> str:
    """$1,234.56"""
    return f"${value:,.2f}"


def export_to_csv(data: DepreciationExport) -> str:
    """Render export data as CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["DEPRECIATION SCHEDULE"])
    writer.writerow(["Property Address", data.property_address])
    writer.writerow(["Property Type", data.property_type])
    writer.writerow(["Depreciation Type", data.depreciation_type])
    writer.writerow(["Depreciation Period", f"{data.depreciation_years:g} years"])
    writer.writerow(["Placed in Service Date", data.placed_in_service_date])
    writer.writerow([])

    basis = data.cost_basis
    writer.writerow(["COST BASIS"])
    writer.writerow(["Purchase Price", format_money(basis.purchase_price)])
    writer.writerow(["Closing Costs", format_money(basis.closing_costs)])
    writer.writerow(["Initial Improvements", format_money(basis.initial_improvements)])
    writer.writerow(["Total Cost Basis", format_money(basis.total_cost_basis)])
    writer.writerow(["Land Value (Non-Depreciable)", format_money(basis.land_value)])
    writer.writerow(["Depreciable Basis", format_money(basis.depreciable_basis)])
    writer.writerow([])

    writer.writerow(["ANNUAL DEPRECIATION SCHEDULE"])
    writer.writerow(SCHEDULE_COLUMNS)
    for item in data.schedule:
        writer.writerow([
            item.year,
            item.months_depreciated,
            format_money(item.beginning_basis),
            format_money(item.depreciation),
            format_money(item.accumulated_depreciation),
            format_money(item.remaining_basis),
        ])

    writer.writerow([])
    writer.writerow(["Generated on", data.generated_date])

    return buffer.getvalue()
