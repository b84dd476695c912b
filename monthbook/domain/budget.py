"""Pure functions for budget resolution and aggregation.

This module contains the functional core for month summaries:
- No I/O operations (no database, no console, no files)
- No side effects
- Exact integer arithmetic only

All monetary amounts are in cents (Money type).
"""

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from monthbook.domain.errors import InvalidAmount, NegativeLimit
from monthbook.domain.models import (
    ROW_CATEGORY,
    BudgetRow,
    Category,
    CategoryId,
    CategoryTotals,
    Money,
    Month,
    MonthlyBudget,
    MonthOverview,
    Transaction,
)


def validate_limit(limit: int) -> Money:
    """Reject limits below zero.

    Args:
        limit: Candidate limit in cents.

    Returns:
        The limit as Money.

    Raises:
        NegativeLimit: If limit is negative.
    """
    if limit < 0:
        raise NegativeLimit(limit)
    return Money(limit)


def parse_money(amount_str: str) -> Money:
    """Parse a major-unit amount string (e.g. "1300.50") to cents.

    Uses Decimal so no binary float is involved; fractions of a cent are
    rounded half-up.

    Raises:
        InvalidAmount: If the string is not a finite number.
    """
    cleaned = amount_str.strip().replace(",", "").lstrip("$£€")
    try:
        value = Decimal(cleaned)
    except InvalidOperation as e:
        raise InvalidAmount(f"Invalid amount: {amount_str!r}") from e
    if not value.is_finite():
        raise InvalidAmount(f"Invalid amount: {amount_str!r}")
    return Money(int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


def format_money(amount: int) -> str:
    """Format cents as a signed major-unit string without float conversion."""
    sign = "-" if amount < 0 else ""
    whole, cents = divmod(abs(amount), 100)
    return f"{sign}${whole:,}.{cents:02d}"


def signed_amount(amount: Money, is_income: bool) -> Money:
    """Apply the ledger sign convention to an unsigned amount."""
    return Money(abs(amount) if is_income else -abs(amount))


def plan_rollover(
    active: Iterable[Category],
    existing: Iterable[MonthlyBudget],
    previous: Mapping[CategoryId, MonthlyBudget | None],
    month: Month,
) -> list[MonthlyBudget]:
    """Decide which budget rows a month is missing and what they should hold.

    Each category is handled on its own: an existing row is left alone, a
    missing row copies the nearest earlier limit, and a category with no
    history starts at zero.

    Args:
        active: Active categories.
        existing: Budget rows already stored for month.
        previous: Nearest earlier budget row per category (None if none found).
        month: Month being resolved.

    Returns:
        New rows to insert, in category order.
    """
    present = {budget.category_id for budget in existing}
    planned: list[MonthlyBudget] = []
    for category in active:
        if category.id in present:
            continue
        source = previous.get(category.id)
        limit = source.limit if source is not None else Money(0)
        planned.append(MonthlyBudget(category_id=category.id, month=month, limit=limit))
        present.add(category.id)
    return planned


def sort_categories(categories: Iterable[Category]) -> list[Category]:
    """Order categories by name (case-sensitive), ties broken by id."""
    return sorted(categories, key=lambda c: (c.name, c.id))


def build_budget_row(category: Category, limit: Money, totals: CategoryTotals) -> BudgetRow:
    """Combine a category, its limit and its month totals into a row."""
    spent = Money(abs(totals.expense_total))
    return BudgetRow(
        name=category.name,
        color=category.color,
        is_income=category.is_income,
        limit=limit,
        spent=spent,
        income=Money(totals.income_total),
        remaining=Money(limit - spent),
        category_id=category.id,
        kind=ROW_CATEGORY,
    )


def compute_budget_rows(
    categories: Iterable[Category],
    budgets: Iterable[MonthlyBudget],
    totals: Mapping[CategoryId, CategoryTotals],
) -> list[BudgetRow]:
    """Compute one summary row per active category.

    Missing limits and missing totals count as zero, so every active category
    appears even without transactions.

    Args:
        categories: Categories to summarise (inactive ones are skipped).
        budgets: Budget rows of the month.
        totals: Income/expense sums of the month keyed by category id.

    Returns:
        Rows ordered by category name, ties broken by id.
    """
    limits = {budget.category_id: budget.limit for budget in budgets}
    empty = CategoryTotals()
    return [
        build_budget_row(category, limits.get(category.id, Money(0)), totals.get(category.id, empty))
        for category in sort_categories(c for c in categories if c.is_active)
    ]


def compute_month_overview(month: Month, transactions: Iterable[Transaction]) -> MonthOverview:
    """Total income, total expenses and net across a month's transactions."""
    total_income = 0
    total_expenses = 0
    for txn in transactions:
        if txn.amount > 0:
            total_income += txn.amount
        else:
            total_expenses += -txn.amount
    return MonthOverview(month=month, total_income=Money(total_income), total_expenses=Money(total_expenses))
