"""
Financial Calculation Engine

Core calculation modules for rental property analysis: income, expenses,
reserves, debt service, cash flow, headline metrics, depreciation and
the CPA depreciation export. Pure functions over plain records.
"""

from app.calculations import (
    cashflow,
    debt,
    depreciation,
    expenses,
    income,
    metrics,
    reserves,
    tax_export,
)

__all__ = [
    "cashflow",
    "debt",
    "depreciation",
    "expenses",
    "income",
    "metrics",
    "reserves",
    "tax_export",
]
