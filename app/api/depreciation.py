"""
Depreciation and tax shield API endpoints.

Tax constants come from settings so a deployment can override them
without code changes.
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from app.calculations import depreciation, tax_export
from app.calculations.numeric import parse_local_date
from app.config import get_tax_assumptions

logger = logging.getLogger(__name__)

router = APIRouter()


class CostBasisInput(BaseModel):
    """Purchase figures that make up the cost basis."""

    property_type: Optional[str] = None
    purchase_price: float
    closing_costs: float = 0.0
    initial_improvements: float = 0.0
    land_value: Optional[float] = None
    placed_in_service_date: Optional[str] = None
    as_of: Optional[date] = None


class TaxShieldInput(BaseModel):
    """Input for tax shield calculation."""

    annual_depreciation: float
    marginal_tax_rate: Optional[float] = None
    accumulated_depreciation: float = 0.0


class PaperLossInput(BaseModel):
    """Input for paper loss comparison."""

    annual_cash_flow: float
    annual_depreciation: float
    marginal_tax_rate: Optional[float] = None


class CostSegInput(BaseModel):
    """Input for cost segregation estimates."""

    depreciable_basis: Optional[float] = None
    amount_5_year: float = 0.0
    amount_7_year: float = 0.0
    amount_15_year: float = 0.0
    bonus_percent: float = 0.0
    marginal_tax_rate: Optional[float] = None


class ExportInput(CostBasisInput):
    """Input for the CPA depreciation export."""

    property_address: str
    property_type: str


def _resolve_basis(inputs: CostBasisInput):
    assumptions = get_tax_assumptions()
    years = depreciation.depreciation_years(inputs.property_type, assumptions)
    basis = depreciation.calculate_cost_basis(
        inputs.purchase_price,
        inputs.closing_costs,
        inputs.initial_improvements,
        inputs.land_value,
        assumptions,
    )
    return years, basis


def _require_in_service_date(inputs: CostBasisInput) -> date:
    try:
        return parse_local_date(inputs.placed_in_service_date, strict=True)
    except ValueError as e:
        logger.warning("Rejected depreciation request: %s", e)
        raise HTTPException(status_code=400, detail="Placed-in-service date is required")


@router.post("/schedule")
async def calculate_schedule(inputs: CostBasisInput):
    """Generate the annual depreciation schedule."""
    in_service = _require_in_service_date(inputs)
    years, basis = _resolve_basis(inputs)

    schedule = depreciation.generate_schedule(
        basis.depreciable_basis, years, in_service, inputs.as_of
    )

    return {
        "depreciation_type": depreciation.depreciation_type(years, get_tax_assumptions()),
        "depreciation_years": years,
        "cost_basis": asdict(basis),
        "schedule": [asdict(item) for item in schedule],
        "total_depreciation": round(sum(item.depreciation for item in schedule), 2),
    }


@router.post("/summary")
async def calculate_summary(inputs: CostBasisInput):
    """Depreciation to date, tax shield and unclaimed estimate."""
    assumptions = get_tax_assumptions()
    years, basis = _resolve_basis(inputs)
    as_of = inputs.as_of or date.today()

    summary = depreciation.depreciation_summary(
        basis.depreciable_basis, years, inputs.placed_in_service_date, as_of
    )
    if summary is None:
        logger.info("Depreciation summary unavailable: missing basis or in-service date")
        return {"summary": None, "tax_shield": None, "unclaimed_depreciation": None}

    shield = depreciation.tax_shield(
        summary.annual_depreciation,
        accumulated_depreciation=summary.accumulated_depreciation,
        assumptions=assumptions,
    )
    unclaimed = depreciation.unclaimed_depreciation(
        inputs.placed_in_service_date, basis.depreciable_basis, years, as_of, assumptions
    )

    return {
        "summary": asdict(summary),
        "tax_shield": asdict(shield),
        "unclaimed_depreciation": unclaimed,
    }


@router.post("/tax-shield")
async def calculate_tax_shield(inputs: TaxShieldInput):
    """Tax savings from depreciation at the marginal rate."""
    shield = depreciation.tax_shield(
        inputs.annual_depreciation,
        inputs.marginal_tax_rate,
        inputs.accumulated_depreciation,
        get_tax_assumptions(),
    )
    return asdict(shield)


@router.post("/paper-loss")
async def calculate_paper_loss(inputs: PaperLossInput):
    """Actual cash flow vs taxable income after depreciation."""
    comparison = depreciation.paper_loss_comparison(
        inputs.annual_cash_flow,
        inputs.annual_depreciation,
        inputs.marginal_tax_rate,
        get_tax_assumptions(),
    )
    return asdict(comparison)


@router.post("/cost-segregation")
async def calculate_cost_segregation(inputs: CostSegInput):
    """Cost segregation potential and first-year bonus benefit."""
    assumptions = get_tax_assumptions()
    potential = depreciation.cost_seg_potential(inputs.depreciable_basis, assumptions)
    benefit = depreciation.cost_seg_first_year_benefit(
        inputs.amount_5_year,
        inputs.amount_7_year,
        inputs.amount_15_year,
        inputs.bonus_percent,
        inputs.marginal_tax_rate,
        assumptions,
    )
    return {
        "potential": asdict(potential) if potential is not None else None,
        "first_year_benefit": benefit,
    }


@router.post("/export")
async def export_depreciation(inputs: ExportInput):
    """Depreciation schedule as CSV for a tax preparer."""
    in_service = _require_in_service_date(inputs)

    data = tax_export.build_export_data(
        property_address=inputs.property_address,
        property_type=inputs.property_type,
        purchase_price=inputs.purchase_price,
        placed_in_service_date=in_service,
        closing_costs=inputs.closing_costs,
        initial_improvements=inputs.initial_improvements,
        land_value=inputs.land_value,
        as_of=inputs.as_of,
        assumptions=get_tax_assumptions(),
    )
    logger.info("Generated depreciation export for %s", inputs.property_address)

    return Response(
        content=tax_export.export_to_csv(data),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="depreciation_schedule.csv"'},
    )
