"""Domain type definitions for monthbook.

These NewTypes provide semantic clarity and help with type checking:
- Money: Amount in cents (minor units)
- Month: Month in YYYY-MM format
- CategoryId: Primary key of a registered category

The frozen dataclasses are plain value records. Validation happens at the
boundary where raw input is accepted, not inside the records.
"""

from dataclasses import dataclass
from typing import NewType

# Money amounts are stored as cents (minor units) to avoid floating point drift
Money = NewType("Money", int)

# Month is always in YYYY-MM format (e.g., "2024-10")
Month = NewType("Month", str)

CategoryId = NewType("CategoryId", int)

# Row kinds produced by the aggregation and virtual category engines
ROW_CATEGORY = "category"
ROW_TOTAL_INCOME = "total_income"
ROW_TITHE = "tithe"
ROW_SPLIT = "split"


@dataclass(frozen=True)
class Category:
    """A registered budget category."""

    id: CategoryId
    name: str
    color: str
    is_income: bool
    is_active: bool


@dataclass(frozen=True)
class Card:
    """A payment method a transaction may reference."""

    id: int
    name: str
    is_active: bool


@dataclass(frozen=True)
class MonthlyBudget:
    """Spending limit for one category in one month."""

    category_id: CategoryId
    month: Month
    limit: Money


@dataclass(frozen=True)
class Transaction:
    """A signed ledger entry. Positive is income, negative is expense."""

    id: int
    category_id: CategoryId
    card_id: int | None
    date: str  # YYYY-MM-DD
    amount: Money
    notes: str | None = None

    @property
    def is_income(self) -> bool:
        return self.amount > 0


@dataclass(frozen=True)
class CategoryTotals:
    """Income and expense sums for one category in one month.

    Both totals are non-negative; expense_total is the absolute value of the
    negative entries.
    """

    income_total: Money = Money(0)
    expense_total: Money = Money(0)


@dataclass(frozen=True)
class BudgetRow:
    """One summary row of a month view.

    category_id is None for virtual rows (total income, tithe, split buckets).
    """

    name: str
    color: str
    is_income: bool
    limit: Money
    spent: Money
    income: Money
    remaining: Money
    category_id: CategoryId | None = None
    kind: str = ROW_CATEGORY

    @property
    def is_virtual(self) -> bool:
        return self.kind != ROW_CATEGORY

    @property
    def is_income_only(self) -> bool:
        """Rows whose remaining figure has no meaning and shows income only."""
        return self.kind in (ROW_TOTAL_INCOME, ROW_TITHE)

    @property
    def is_over_budget(self) -> bool:
        return not self.is_income_only and self.remaining < 0

    @property
    def percent_spent(self) -> int:
        """Share of the limit already spent, as a whole percentage (half-up)."""
        if self.limit <= 0:
            return 0
        return (200 * self.spent + self.limit) // (2 * self.limit)


@dataclass(frozen=True)
class MonthOverview:
    """Totals across every transaction in a month."""

    month: Month
    total_income: Money
    total_expenses: Money

    @property
    def net(self) -> Money:
        return Money(self.total_income - self.total_expenses)
