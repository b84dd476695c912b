"""SQLite-backed collaborators for the month engine.

SqliteLedger binds the query functions to one database path so it can be
passed to the engine as the category registry, the budget ledger store and the
transaction ledger at once.
"""

from dataclasses import dataclass, field
from pathlib import Path

from monthbook.domain.models import (
    Category,
    CategoryId,
    CategoryTotals,
    Month,
    MonthlyBudget,
    Transaction,
)
from monthbook.store import queries
from monthbook.store.schema import get_db_path


@dataclass(frozen=True)
class SqliteLedger:
    """Category registry, budget store and transaction ledger over one SQLite file."""

    db_path: Path = field(default_factory=get_db_path)

    # Category registry

    def list_active_categories(self) -> list[Category]:
        return queries.list_active_categories(self.db_path)

    def list_categories(self) -> list[Category]:
        return queries.get_all_categories(self.db_path)

    # Budget ledger store

    def get_budgets_for_month(self, month: Month) -> list[MonthlyBudget]:
        return queries.get_budgets_for_month(month, self.db_path)

    def get_latest_budget_before(
        self, category_id: CategoryId, month: Month, earliest: Month | None = None
    ) -> MonthlyBudget | None:
        return queries.get_latest_budget_before(category_id, month, earliest, self.db_path)

    def insert_budget_if_absent(self, category_id: CategoryId, month: Month, limit: int) -> bool:
        return queries.insert_budget_if_absent(category_id, month, limit, self.db_path)

    # Transaction ledger

    def sum_signed_by_category(self, month: Month) -> dict[CategoryId, CategoryTotals]:
        return queries.sum_signed_by_category(month, self.db_path)

    def list_transactions_for_month(self, month: Month) -> list[Transaction]:
        return queries.list_transactions_for_month(month, self.db_path)
