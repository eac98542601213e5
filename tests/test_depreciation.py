"""
Tests for depreciation and tax shield calculations.
"""

import pytest
from datetime import date

from app.calculations.assumptions import DEFAULT_ASSUMPTIONS
from app.calculations.depreciation import (
    annual_depreciation,
    calculate_cost_basis,
    cost_seg_first_year_benefit,
    cost_seg_potential,
    depreciation_summary,
    depreciation_type,
    depreciation_years,
    final_year_fraction,
    first_year_fraction,
    generate_schedule,
    last_year_fraction,
    monthly_depreciation,
    paper_loss_comparison,
    recovery_year_count,
    tax_shield,
    unclaimed_depreciation,
    year_depreciation,
)


class TestScheduleSelection:
    """Test recovery period and cost basis."""

    def test_residential_types(self):
        """Test residential property types use 27.5 years."""
        for property_type in ("SFR", "duplex", "Fourplex", "single_family", "Condo"):
            assert depreciation_years(property_type) == 27.5

    def test_commercial_types(self):
        """Test everything else uses 39 years."""
        assert depreciation_years("Multi-Family") == 39.0
        assert depreciation_years("Commercial") == 39.0

    def test_missing_type_defaults_residential(self):
        """Test missing type is treated as residential."""
        assert depreciation_years(None) == 27.5
        assert depreciation_years("  ") == 27.5

    def test_custom_assumptions(self):
        """Test recovery periods can be overridden."""
        assumptions = DEFAULT_ASSUMPTIONS.with_overrides(commercial_years=40.0)
        assert depreciation_years("Office", assumptions) == 40.0
        assert depreciation_type(40.0, assumptions) == "commercial"
        assert depreciation_type(27.5) == "residential"

    def test_cost_basis_estimates_land(self):
        """Test land defaults to 20% of total basis."""
        basis = calculate_cost_basis(250000, 5000)
        assert basis.total_cost_basis == 255000
        assert abs(basis.land_value - 51000) < 0.01
        assert abs(basis.depreciable_basis - 204000) < 0.01

    def test_cost_basis_with_land_value(self):
        """Test explicit land value is used as given."""
        basis = calculate_cost_basis(250000, 5000, 10000, land_value=60000)
        assert basis.total_cost_basis == 265000
        assert basis.depreciable_basis == 205000

    def test_annual_and_monthly(self):
        """Test straight-line amounts."""
        assert annual_depreciation(275000, 27.5) == 10000
        assert abs(monthly_depreciation(275000, 27.5) - 833.33) < 0.01
        assert annual_depreciation(0, 27.5) == 0.0


class TestMidMonthConvention:
    """Test first, final and partial year fractions."""

    def test_first_year_fraction(self):
        """Test January and December placements."""
        assert first_year_fraction(1) == 11.5 / 12
        assert first_year_fraction(12) == 0.5 / 12
        assert first_year_fraction(7) == 5.5 / 12

    def test_invalid_month_is_full_year(self):
        """Test out-of-range months get a full year."""
        assert first_year_fraction(0) == 1.0
        assert first_year_fraction(13) == 1.0

    def test_fractions_are_complementary(self):
        """Test first + last year fractions equal one for every month."""
        for month in range(1, 13):
            assert abs(first_year_fraction(month) + last_year_fraction(month) - 1.0) < 1e-12

    def test_recovery_year_count(self):
        """Test the number of tax years spanned."""
        assert recovery_year_count(39.0, 1) == 40
        assert recovery_year_count(39.0, 7) == 40
        assert recovery_year_count(27.5, 1) == 28
        assert recovery_year_count(27.5, 6) == 28
        assert recovery_year_count(27.5, 7) == 29
        assert recovery_year_count(27.5, 12) == 29

    def test_final_year_fraction(self):
        """Test the final year picks up the rest of the period."""
        for month in range(1, 13):
            assert abs(final_year_fraction(39.0, month) - last_year_fraction(month)) < 1e-9
        assert abs(final_year_fraction(27.5, 1) - 6.5 / 12) < 1e-9
        assert abs(final_year_fraction(27.5, 12) - 5.5 / 12) < 1e-9

    def test_year_depreciation_bounds(self):
        """Test degenerate inputs and years past the schedule."""
        assert year_depreciation(0, 27.5, 1, 1) == 0.0
        assert year_depreciation(275000, 27.5, 0, 1) == 0.0
        assert year_depreciation(275000, 27.5, 29, 1) == 0.0
        assert year_depreciation(275000, 27.5, 5, 1, accumulated_before=275000) == 0.0
        assert year_depreciation(275000, 27.5, 5, 1, accumulated_before=274000) == 1000


class TestSchedule:
    """Test the generated depreciation schedule."""

    def test_residential_january_first_year(self):
        """Test $275,000 placed in service January 2024."""
        schedule = generate_schedule(275000, 27.5, "2024-01-15")

        first = schedule[0]
        assert first.year == 2024
        assert first.year_number == 1
        assert first.months_depreciated == 12
        assert first.depreciation == 9583.33
        assert first.beginning_basis == 275000.0

    def test_commercial_july_first_year(self):
        """Test $390,000 on 39 years placed in service July."""
        schedule = generate_schedule(390000, 39.0, "2023-07-01")

        assert schedule[0].depreciation == 4583.33
        assert schedule[0].months_depreciated == 6
        assert len(schedule) == 40
        assert schedule[-1].year == 2062

    @pytest.mark.parametrize("years", [27.5, 39.0])
    @pytest.mark.parametrize("month", range(1, 13))
    def test_total_equals_basis(self, years, month):
        """Test depreciation sums to the basis for every placement month."""
        basis = 312345.67
        schedule = generate_schedule(basis, years, date(2020, month, 15))

        total = sum(item.depreciation for item in schedule)
        assert abs(total - basis) < 1.0
        assert len(schedule) == recovery_year_count(years, month)
        assert abs(schedule[-1].accumulated_depreciation - basis) < 1.0

    @pytest.mark.parametrize("month", [1, 6, 7, 12])
    def test_remaining_basis_non_increasing(self, month):
        """Test remaining basis only goes down and ends near zero."""
        schedule = generate_schedule(275000, 27.5, date(2021, month, 1))

        remaining = [item.remaining_basis for item in schedule]
        assert all(later <= earlier for earlier, later in zip(remaining, remaining[1:]))
        assert remaining[-1] < 1.0
        assert all(value >= 0 for value in remaining)

    def test_final_year_months(self):
        """Test final year months for residential placements."""
        january = generate_schedule(275000, 27.5, "2024-01-01")
        july = generate_schedule(275000, 27.5, "2024-07-01")

        assert len(january) == 28
        assert january[-1].months_depreciated == 7
        assert abs(january[-1].depreciation - 5416.67) < 0.01
        assert len(july) == 29
        assert july[-1].months_depreciated == 1

    def test_schedule_without_date_starts_in_january(self):
        """Test a missing date starts the schedule in January of as_of's year."""
        schedule = generate_schedule(275000, 27.5, None, as_of=date(2025, 8, 1))
        assert schedule[0].year == 2025
        assert schedule[0].months_depreciated == 12

    def test_empty_schedule(self):
        """Test no basis produces no rows."""
        assert generate_schedule(0, 27.5, "2024-01-01") == []
        assert generate_schedule(-5, 27.5, "2024-01-01") == []


class TestSummary:
    """Test depreciation summary as of a date."""

    def test_summary_mid_year(self):
        """Test prior years in full plus the current year prorated."""
        summary = depreciation_summary(275000, 27.5, "2020-01-10", as_of=date(2024, 6, 30))

        # 9,583.33 + 3 * 10,000 + 6/12 of 10,000
        assert summary.accumulated_depreciation == 44583.33
        assert summary.remaining_basis == 230416.67
        assert summary.years_completed == 4
        assert summary.years_remaining == 24
        assert summary.annual_depreciation == 10000
        assert summary.total_depreciable_years == 27.5

    def test_summary_after_schedule_ends(self):
        """Test everything is depreciated once the schedule is over."""
        summary = depreciation_summary(275000, 27.5, "1990-01-01", as_of=date(2024, 1, 1))
        assert abs(summary.accumulated_depreciation - 275000) < 1.0
        assert summary.years_remaining == 0

    def test_summary_requires_date_and_basis(self):
        """Test None without an in-service date or basis."""
        assert depreciation_summary(275000, 27.5, None, as_of=date(2024, 1, 1)) is None
        assert depreciation_summary(275000, 27.5, "garbage", as_of=date(2024, 1, 1)) is None
        assert depreciation_summary(0, 27.5, "2020-01-01", as_of=date(2024, 1, 1)) is None


class TestTaxShield:
    """Test tax shield and paper loss."""

    def test_default_marginal_rate(self):
        """Test 24% default rate."""
        shield = tax_shield(10000)
        assert shield.annual_tax_shield == 2400.0
        assert shield.monthly_tax_shield == 200.0
        assert shield.total_tax_shield_to_date == 0.0
        assert shield.marginal_tax_rate == 0.24

    def test_accumulated_shield(self):
        """Test shield to date on accumulated depreciation."""
        shield = tax_shield(10000, marginal_tax_rate=0.32, accumulated_depreciation=44583.33)
        assert shield.annual_tax_shield == 3200.0
        assert shield.total_tax_shield_to_date == 14266.67

    def test_paper_loss(self):
        """Test positive cash flow can show a taxable loss."""
        comparison = paper_loss_comparison(6000, 10000)
        assert comparison.actual_cash_flow == 6000.0
        assert comparison.paper_loss == 10000.0
        assert comparison.taxable_income == -4000.0
        assert comparison.tax_savings == 2400.0
        assert comparison.effective_cash_flow == 8400.0


class TestCostSegregation:
    """Test cost segregation estimates."""

    def test_large_basis(self):
        """Test $500,000 basis is the top tier."""
        result = cost_seg_potential(500000)
        assert result.percentage == 35.0
        assert result.level == "High Alpha"
        assert result.potential_value == 175000

    def test_tier_boundary(self):
        """Test $200,000 is the middle tier and $199,999 the lowest."""
        at_boundary = cost_seg_potential(200000)
        below = cost_seg_potential(199999)

        assert at_boundary.percentage == 30.0
        assert at_boundary.potential_value == 60000
        assert below.percentage == 25.0
        assert below.level == "Medium"
        assert below.potential_value == 50000

    def test_missing_basis(self):
        """Test None basis gives None."""
        assert cost_seg_potential(None) is None

    def test_first_year_benefit(self):
        """Test bonus depreciation benefit on reclassified amounts."""
        assert cost_seg_first_year_benefit(50000, 30000, 20000, 1.0) == 24000.0
        assert cost_seg_first_year_benefit(50000, 0, 0, 0.6, marginal_tax_rate=0.35) == 10500.0
        assert cost_seg_first_year_benefit() == 0.0


class TestUnclaimedDepreciation:
    """Test the day-count unclaimed depreciation estimate."""

    def test_one_year_owned(self):
        """Test 365 days approximates just under a full year."""
        # 365 / 30.44 months of 10,000/year
        result = unclaimed_depreciation("2023-01-01", 275000, 27.5, as_of=date(2024, 1, 1))
        assert result == 9992

    def test_future_purchase(self):
        """Test a future purchase date has nothing unclaimed."""
        assert unclaimed_depreciation("2030-01-01", 275000, as_of=date(2024, 1, 1)) == 0

    def test_missing_inputs(self):
        """Test None without date or basis."""
        assert unclaimed_depreciation(None, 275000, as_of=date(2024, 1, 1)) is None
        assert unclaimed_depreciation("2023-01-01", None, as_of=date(2024, 1, 1)) is None
