"""Month budget engine.

The three stages of a month view, run in this order:
1. resolve_month: make sure every active category has a limit for the month
2. compute_summary: join limits with the month's ledger sums
3. apply_virtual_rules: add Total Income, Tithe and split rows

Every operation takes its collaborators as arguments. SqliteLedger satisfies
all three protocols.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Protocol

from monthbook.dates import lookback_start, parse_month
from monthbook.domain.budget import compute_budget_rows, compute_month_overview, plan_rollover
from monthbook.domain.errors import CategoryNotFound
from monthbook.domain.models import (
    BudgetRow,
    Category,
    CategoryId,
    CategoryTotals,
    Month,
    MonthlyBudget,
    MonthOverview,
    Transaction,
)
from monthbook.domain.virtual import VirtualRules
from monthbook.domain.virtual import apply_virtual_rules as apply_rules

logger = logging.getLogger(__name__)

DEFAULT_MAX_LOOKBACK_MONTHS = 24


class CategoryRegistry(Protocol):
    """Authoritative list of categories."""

    def list_active_categories(self) -> list[Category]: ...  # pragma: no cover - interface

    def list_categories(self) -> list[Category]: ...  # pragma: no cover - interface


class BudgetLedgerStore(Protocol):
    """Persisted per-(category, month) limits."""

    def get_budgets_for_month(self, month: Month) -> list[MonthlyBudget]: ...  # pragma: no cover - interface

    def get_latest_budget_before(
        self, category_id: CategoryId, month: Month, earliest: Month | None = None
    ) -> MonthlyBudget | None: ...  # pragma: no cover - interface

    def insert_budget_if_absent(
        self, category_id: CategoryId, month: Month, limit: int
    ) -> bool: ...  # pragma: no cover - interface


class TransactionLedger(Protocol):
    """Persisted signed monetary entries."""

    def sum_signed_by_category(
        self, month: Month
    ) -> dict[CategoryId, CategoryTotals]: ...  # pragma: no cover - interface

    def list_transactions_for_month(self, month: Month) -> list[Transaction]: ...  # pragma: no cover - interface


@dataclass(frozen=True)
class MonthView:
    """Everything a month page shows."""

    month: Month
    rows: list[BudgetRow]
    overview: MonthOverview
    transactions: list[Transaction]
    created: int


def resolve_month(
    month: str,
    registry: CategoryRegistry,
    budgets: BudgetLedgerStore,
    max_lookback: int = DEFAULT_MAX_LOOKBACK_MONTHS,
) -> int:
    """Make sure every active category has a budget row for month.

    Missing rows copy the nearest earlier limit of the same category within
    max_lookback months, or start at zero. Existing rows are never touched, so
    calling this repeatedly is harmless.

    Args:
        month: Month in YYYY-MM format.
        registry: Category registry.
        budgets: Budget ledger store.
        max_lookback: How many earlier months to search for a limit.

    Returns:
        Number of rows this call created. Rows lost to a concurrent writer
        are not counted.

    Raises:
        InvalidMonthFormat: If month is malformed. Nothing is read first.
        sqlite3.Error: If the store fails.
    """
    target = parse_month(month)
    earliest = lookback_start(target, max_lookback)

    active = registry.list_active_categories()
    existing = budgets.get_budgets_for_month(target)
    present = {budget.category_id for budget in existing}

    previous = {
        category.id: budgets.get_latest_budget_before(category.id, target, earliest)
        for category in active
        if category.id not in present
    }

    created = 0
    for row in plan_rollover(active, existing, previous, target):
        source = previous.get(row.category_id)
        logger.debug(
            "Rollover %s category %s: limit %s from %s",
            target,
            row.category_id,
            row.limit,
            source.month if source else "default",
        )
        if budgets.insert_budget_if_absent(row.category_id, target, row.limit):
            created += 1

    if created:
        logger.info("Created %d budget row(s) for %s", created, target)
    return created


def compute_summary(
    month: str,
    registry: CategoryRegistry,
    budgets: BudgetLedgerStore,
    ledger: TransactionLedger,
) -> list[BudgetRow]:
    """Compute one summary row per active category for month.

    Call resolve_month first; a category still lacking a limit shows zero.

    Returns:
        Rows ordered by category name, ties broken by id.

    Raises:
        InvalidMonthFormat: If month is malformed.
        sqlite3.Error: If the store fails.
    """
    target = parse_month(month)
    return compute_budget_rows(
        registry.list_active_categories(),
        budgets.get_budgets_for_month(target),
        ledger.sum_signed_by_category(target),
    )


def bind_split_rules(rules: VirtualRules, categories: Sequence[Category]) -> VirtualRules:
    """Attach category ids to split rules, dropping rules with no such category.

    A missing source category does not fail the summary; the rule is logged
    and skipped.
    """
    by_name = {category.name: category for category in categories}
    bound = []
    for rule in rules.splits:
        category = by_name.get(rule.source)
        if category is None:
            logger.warning("Skipping split rule: %s", CategoryNotFound(rule.source))
            continue
        bound.append(replace(rule, source_id=category.id))
    return replace(rules, splits=tuple(bound))


def apply_virtual_rules(
    rows: Sequence[BudgetRow],
    registry: CategoryRegistry,
    rules: VirtualRules,
) -> list[BudgetRow]:
    """Bind split rules against the registry and add the virtual rows.

    Returns:
        Total Income and Tithe first, then the category rows with split
        sources replaced in place by their buckets.
    """
    return apply_rules(rows, bind_split_rules(rules, registry.list_categories()))


def build_month_view(
    month: str,
    registry: CategoryRegistry,
    budgets: BudgetLedgerStore,
    ledger: TransactionLedger,
    rules: VirtualRules,
    max_lookback: int = DEFAULT_MAX_LOOKBACK_MONTHS,
) -> MonthView:
    """Resolve, summarise and decorate a month in the required order."""
    target = parse_month(month)
    created = resolve_month(target, registry, budgets, max_lookback)
    rows = compute_summary(target, registry, budgets, ledger)
    transactions = ledger.list_transactions_for_month(target)
    return MonthView(
        month=target,
        rows=apply_virtual_rules(rows, registry, rules),
        overview=compute_month_overview(target, transactions),
        transactions=transactions,
        created=created,
    )
