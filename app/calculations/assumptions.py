"""
Tax and Depreciation Assumptions

Every jurisdiction-dependent constant used by the engine lives here.
Functions take an optional `assumptions` argument; pass a custom
TaxAssumptions to model a tax-law change without touching formulas.
"""

from dataclasses import dataclass, replace
from typing import Tuple

# IRS recovery periods (years)
RESIDENTIAL_DEPRECIATION_YEARS = 27.5
COMMERCIAL_DEPRECIATION_YEARS = 39.0

DEFAULT_MARGINAL_TAX_RATE = 0.24
DEFAULT_LAND_VALUE_RATIO = 0.20

RESIDENTIAL_PROPERTY_TYPES = ("SFR", "Single-Family", "Duplex", "Triplex", "Fourplex", "Condo", "Townhouse")

# (minimum depreciable basis, percentage of basis eligible for acceleration)
# Product-chosen placeholders, not an engineering study.
COST_SEG_TIERS = ((500_000.0, 35.0), (200_000.0, 30.0), (0.0, 25.0))

# (minimum percentage, level label)
COST_SEG_LEVELS = ((30.0, "High Alpha"), (15.0, "Medium"), (0.0, "Low"))

AVERAGE_DAYS_PER_MONTH = 30.44


@dataclass(frozen=True)
class TaxAssumptions:
    """Constants injected into the depreciation and tax-shield calculations."""

    residential_years: float = RESIDENTIAL_DEPRECIATION_YEARS
    commercial_years: float = COMMERCIAL_DEPRECIATION_YEARS
    residential_property_types: Tuple[str, ...] = RESIDENTIAL_PROPERTY_TYPES
    marginal_tax_rate: float = DEFAULT_MARGINAL_TAX_RATE
    land_value_ratio: float = DEFAULT_LAND_VALUE_RATIO
    cost_seg_tiers: Tuple[Tuple[float, float], ...] = COST_SEG_TIERS
    cost_seg_levels: Tuple[Tuple[float, str], ...] = COST_SEG_LEVELS
    average_days_per_month: float = AVERAGE_DAYS_PER_MONTH

    def with_overrides(self, **changes) -> "TaxAssumptions":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


DEFAULT_ASSUMPTIONS = TaxAssumptions()
