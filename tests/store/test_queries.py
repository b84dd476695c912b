"""Tests for monthbook.store against a temporary SQLite database."""

import sqlite3
from pathlib import Path

import pytest

from monthbook.domain.errors import (
    CategoryInUse,
    CategoryNotFound,
    DuplicateBudgetRow,
    DuplicateCategory,
    NegativeLimit,
    TransactionNotFound,
)
from monthbook.domain.models import CategoryTotals, Money, Month
from monthbook.store import queries
from monthbook.store.schema import DEFAULT_CARDS, DEFAULT_CATEGORIES, get_db_path, init_database

MARCH = Month("2024-03")


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "monthbook.db"
    init_database(path)
    return path


class TestSchema:
    """Tests for init_database and get_db_path."""

    def test_seed_adds_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "seeded.db"

        init_database(path, seed=True)

        assert len(queries.get_all_categories(path)) == len(DEFAULT_CATEGORIES)
        assert [c.name for c in queries.get_all_cards(path)] == sorted(DEFAULT_CARDS)

    def test_init_is_repeatable(self, tmp_path: Path) -> None:
        """Should not duplicate seed rows when run twice."""
        path = tmp_path / "seeded.db"

        init_database(path, seed=True)
        init_database(path, seed=True)

        assert len(queries.get_all_categories(path)) == len(DEFAULT_CATEGORIES)

    def test_db_path_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("MONTHBOOK_DB", str(tmp_path / "custom.db"))

        assert get_db_path() == tmp_path / "custom.db"

    def test_db_path_follows_xdg(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("MONTHBOOK_DB", raising=False)
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

        assert get_db_path() == tmp_path / "monthbook" / "monthbook.db"


class TestCategories:
    """Tests for category queries."""

    def test_add_and_get(self, db_path: Path) -> None:
        category_id = queries.add_category("Groceries", "#FFB3BA", db_path=db_path)

        category = queries.get_category(category_id, db_path)

        assert category.name == "Groceries"
        assert not category.is_income
        assert category.is_active

    def test_duplicate_name(self, db_path: Path) -> None:
        queries.add_category("Groceries", "#FFB3BA", db_path=db_path)

        with pytest.raises(DuplicateCategory):
            queries.add_category("Groceries", "#BAE1FF", db_path=db_path)

    def test_list_active_skips_inactive(self, db_path: Path) -> None:
        queries.add_category("Rent", "#BAE1FF", db_path=db_path)
        queries.add_category("Old", "#BAE1FF", is_active=False, db_path=db_path)

        assert [c.name for c in queries.list_active_categories(db_path)] == ["Rent"]
        assert [c.name for c in queries.get_all_categories(db_path)] == ["Old", "Rent"]

    def test_update_keeps_color_when_none(self, db_path: Path) -> None:
        category_id = queries.add_category("Phone", "#FFFFBA", db_path=db_path)

        queries.update_category(category_id, "Mobile", None, False, False, db_path)

        category = queries.get_category(category_id, db_path)
        assert (category.name, category.color, category.is_active) == ("Mobile", "#FFFFBA", False)

    def test_update_missing(self, db_path: Path) -> None:
        with pytest.raises(CategoryNotFound):
            queries.update_category(42, "Nope", None, False, True, db_path)

    def test_get_missing(self, db_path: Path) -> None:
        with pytest.raises(CategoryNotFound):
            queries.get_category(42, db_path)

    def test_find_by_name(self, db_path: Path) -> None:
        queries.add_category("Health", "#D4F0F0", db_path=db_path)

        assert queries.find_category_by_name("Health", db_path) is not None
        assert queries.find_category_by_name("health", db_path) is None

    def test_delete_unused_removes_budgets(self, db_path: Path) -> None:
        category_id = queries.add_category("Other", "#f8f9fa", db_path=db_path)
        queries.insert_budget(category_id, MARCH, 1000, db_path)

        queries.delete_category(category_id, db_path)

        assert queries.get_all_categories(db_path) == []
        assert queries.get_budgets_for_month(MARCH, db_path) == []

    def test_delete_in_use(self, db_path: Path) -> None:
        """Should refuse to delete a category with transactions."""
        category_id = queries.add_category("Rent", "#BAE1FF", db_path=db_path)
        queries.insert_transaction(category_id, "2024-03-01", Money(-130000), db_path=db_path)

        with pytest.raises(CategoryInUse) as excinfo:
            queries.delete_category(category_id, db_path)

        assert excinfo.value.transaction_count == 1
        assert queries.get_category(category_id, db_path).name == "Rent"

    def test_delete_missing(self, db_path: Path) -> None:
        with pytest.raises(CategoryNotFound):
            queries.delete_category(42, db_path)


class TestBudgets:
    """Tests for monthly budget queries."""

    def test_insert_and_read(self, db_path: Path) -> None:
        category_id = queries.add_category("Groceries", "#FFB3BA", db_path=db_path)

        queries.insert_budget(category_id, MARCH, 40000, db_path)

        [budget] = queries.get_budgets_for_month(MARCH, db_path)
        assert (budget.category_id, budget.month, budget.limit) == (category_id, MARCH, 40000)

    def test_duplicate_row(self, db_path: Path) -> None:
        """Should raise DuplicateBudgetRow on a second insert for the same month."""
        category_id = queries.add_category("Groceries", "#FFB3BA", db_path=db_path)
        queries.insert_budget(category_id, MARCH, 40000, db_path)

        with pytest.raises(DuplicateBudgetRow):
            queries.insert_budget(category_id, MARCH, 1, db_path)

    def test_insert_if_absent_keeps_first_value(self, db_path: Path) -> None:
        category_id = queries.add_category("Groceries", "#FFB3BA", db_path=db_path)

        assert queries.insert_budget_if_absent(category_id, MARCH, 40000, db_path) is True
        assert queries.insert_budget_if_absent(category_id, MARCH, 1, db_path) is False

        assert queries.get_budgets_for_month(MARCH, db_path)[0].limit == 40000

    def test_negative_limit(self, db_path: Path) -> None:
        category_id = queries.add_category("Groceries", "#FFB3BA", db_path=db_path)

        with pytest.raises(NegativeLimit):
            queries.insert_budget(category_id, MARCH, -1, db_path)
        with pytest.raises(NegativeLimit):
            queries.set_budget(category_id, MARCH, -1, db_path)

    def test_unknown_category_is_a_store_error(self, db_path: Path) -> None:
        """Should let the foreign key failure propagate as sqlite3.Error."""
        with pytest.raises(sqlite3.IntegrityError):
            queries.insert_budget(42, MARCH, 100, db_path)

    def test_if_absent_only_swallows_duplicates(self, db_path: Path) -> None:
        """Should treat only a unique conflict as an existing row."""
        with pytest.raises(sqlite3.IntegrityError) as excinfo:
            queries.insert_budget_if_absent(42, MARCH, 100, db_path)

        assert excinfo.value.sqlite_errorname == "SQLITE_CONSTRAINT_FOREIGNKEY"

    def test_set_budget_upserts(self, db_path: Path) -> None:
        category_id = queries.add_category("Rent", "#BAE1FF", db_path=db_path)

        queries.set_budget(category_id, MARCH, 100000, db_path)
        queries.set_budget(category_id, MARCH, 130000, db_path)

        [budget] = queries.get_budgets_for_month(MARCH, db_path)
        assert budget.limit == 130000

    def test_latest_before(self, db_path: Path) -> None:
        """Should return the nearest earlier row, skipping the target month."""
        category_id = queries.add_category("Rent", "#BAE1FF", db_path=db_path)
        queries.insert_budget(category_id, Month("2023-11"), 100000, db_path)
        queries.insert_budget(category_id, Month("2024-01"), 120000, db_path)
        queries.insert_budget(category_id, MARCH, 130000, db_path)

        budget = queries.get_latest_budget_before(category_id, MARCH, db_path=db_path)

        assert budget is not None
        assert (budget.month, budget.limit) == ("2024-01", 120000)

    def test_latest_before_respects_earliest(self, db_path: Path) -> None:
        category_id = queries.add_category("Rent", "#BAE1FF", db_path=db_path)
        queries.insert_budget(category_id, Month("2021-01"), 100000, db_path)

        assert queries.get_latest_budget_before(category_id, MARCH, Month("2022-03"), db_path) is None
        assert queries.get_latest_budget_before(category_id, MARCH, Month("2021-01"), db_path) is not None


class TestTransactions:
    """Tests for transaction queries."""

    def test_month_boundaries(self, db_path: Path) -> None:
        """Should include only entries dated inside the month."""
        category_id = queries.add_category("Groceries", "#FFB3BA", db_path=db_path)
        queries.insert_transaction(category_id, "2024-02-29", Money(-100), db_path=db_path)
        queries.insert_transaction(category_id, "2024-03-01", Money(-200), db_path=db_path)
        queries.insert_transaction(category_id, "2024-03-31", Money(-300), db_path=db_path)
        queries.insert_transaction(category_id, "2024-04-01", Money(-400), db_path=db_path)

        transactions = queries.list_transactions_for_month(MARCH, db_path)

        assert [t.date for t in transactions] == ["2024-03-31", "2024-03-01"]

    def test_sum_by_category(self, db_path: Path) -> None:
        groceries = queries.add_category("Groceries", "#FFB3BA", db_path=db_path)
        salary = queries.add_category("Salary", "#BAFFC9", is_income=True, db_path=db_path)
        queries.insert_transaction(groceries, "2024-03-02", Money(-4550), db_path=db_path)
        queries.insert_transaction(groceries, "2024-03-09", Money(-2000), db_path=db_path)
        queries.insert_transaction(groceries, "2024-03-10", Money(500), notes="refund", db_path=db_path)
        queries.insert_transaction(salary, "2024-03-25", Money(300000), db_path=db_path)
        queries.insert_transaction(salary, "2024-04-25", Money(300000), db_path=db_path)

        totals = queries.sum_signed_by_category(MARCH, db_path)

        assert totals == {
            groceries: CategoryTotals(income_total=Money(500), expense_total=Money(6550)),
            salary: CategoryTotals(income_total=Money(300000), expense_total=Money(0)),
        }

    def test_update_and_get(self, db_path: Path) -> None:
        category_id = queries.add_category("Groceries", "#FFB3BA", db_path=db_path)
        card_id = queries.add_card("Debit", db_path)
        transaction_id = queries.insert_transaction(category_id, "2024-03-02", Money(-100), db_path=db_path)

        queries.update_transaction(transaction_id, category_id, "2024-03-03", Money(-250), card_id, "milk", db_path)

        transaction = queries.get_transaction(transaction_id, db_path)
        assert (transaction.date, transaction.amount, transaction.card_id, transaction.notes) == (
            "2024-03-03",
            -250,
            card_id,
            "milk",
        )

    def test_missing_transaction(self, db_path: Path) -> None:
        with pytest.raises(TransactionNotFound):
            queries.get_transaction(7, db_path)
        with pytest.raises(TransactionNotFound):
            queries.delete_transaction(7, db_path)
        with pytest.raises(TransactionNotFound):
            queries.update_transaction(7, 1, "2024-03-01", Money(-1), db_path=db_path)

    def test_delete(self, db_path: Path) -> None:
        category_id = queries.add_category("Groceries", "#FFB3BA", db_path=db_path)
        transaction_id = queries.insert_transaction(category_id, "2024-03-02", Money(-100), db_path=db_path)

        queries.delete_transaction(transaction_id, db_path)

        assert queries.list_transactions_for_month(MARCH, db_path) == []


class TestCards:
    """Tests for card queries."""

    def test_add_and_deactivate(self, db_path: Path) -> None:
        card_id = queries.add_card("Credit", db_path)

        assert queries.set_card_active(card_id, False, db_path) is True

        [card] = queries.get_all_cards(db_path)
        assert not card.is_active

    def test_set_active_on_missing_card(self, db_path: Path) -> None:
        assert queries.set_card_active(99, True, db_path) is False
