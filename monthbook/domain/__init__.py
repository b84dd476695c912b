"""Domain models and types for monthbook.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Business logic separated from infrastructure
"""

from monthbook.domain.models import (
    BudgetRow,
    Card,
    Category,
    CategoryId,
    CategoryTotals,
    Money,
    Month,
    MonthlyBudget,
    MonthOverview,
    Transaction,
)

__all__ = [
    "BudgetRow",
    "Card",
    "Category",
    "CategoryId",
    "CategoryTotals",
    "Money",
    "Month",
    "MonthlyBudget",
    "MonthOverview",
    "Transaction",
]
