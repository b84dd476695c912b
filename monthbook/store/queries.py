"""Database query functions."""

import logging
import sqlite3
from pathlib import Path
from typing import Any

from monthbook.dates import month_range
from monthbook.domain.budget import validate_limit
from monthbook.domain.errors import (
    CategoryInUse,
    CategoryNotFound,
    DuplicateBudgetRow,
    DuplicateCategory,
    TransactionNotFound,
)
from monthbook.domain.models import (
    Card,
    Category,
    CategoryId,
    CategoryTotals,
    Money,
    Month,
    MonthlyBudget,
    Transaction,
)
from monthbook.store.schema import get_db_path

logger = logging.getLogger(__name__)

_CATEGORY_COLUMNS = "id, name, color, is_income, is_active"
_TRANSACTION_COLUMNS = "id, category_id, card_id, transaction_date, amount, notes"


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Create a database connection with row factory and foreign keys on.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Database connection with row_factory configured.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path, timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _to_category(row: sqlite3.Row) -> Category:
    return Category(
        id=CategoryId(row["id"]),
        name=row["name"],
        color=row["color"],
        is_income=bool(row["is_income"]),
        is_active=bool(row["is_active"]),
    )


def _to_transaction(row: sqlite3.Row) -> Transaction:
    return Transaction(
        id=row["id"],
        category_id=CategoryId(row["category_id"]),
        card_id=row["card_id"],
        date=row["transaction_date"],
        amount=Money(row["amount"]),
        notes=row["notes"],
    )


def _to_budget(row: sqlite3.Row) -> MonthlyBudget:
    return MonthlyBudget(
        category_id=CategoryId(row["category_id"]),
        month=Month(row["month"]),
        limit=Money(row["limit_amount"]),
    )


# Categories


def get_all_categories(db_path: Path | None = None) -> list[Category]:
    """Get every category, active or not.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Categories sorted by name.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.execute(f"SELECT {_CATEGORY_COLUMNS} FROM categories ORDER BY name, id")
        return [_to_category(row) for row in cursor.fetchall()]


def list_active_categories(db_path: Path | None = None) -> list[Category]:
    """Get active categories sorted by name.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.execute(f"SELECT {_CATEGORY_COLUMNS} FROM categories WHERE is_active = 1 ORDER BY name, id")
        return [_to_category(row) for row in cursor.fetchall()]


def get_category(category_id: int, db_path: Path | None = None) -> Category:
    """Get a category by id.

    Raises:
        CategoryNotFound: If no category has this id.
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        row = conn.execute(f"SELECT {_CATEGORY_COLUMNS} FROM categories WHERE id = ?", (category_id,)).fetchone()
    if row is None:
        raise CategoryNotFound(category_id)
    return _to_category(row)


def find_category_by_name(name: str, db_path: Path | None = None) -> Category | None:
    """Get a category by exact name, or None."""
    with _connect(db_path) as conn:
        row = conn.execute(f"SELECT {_CATEGORY_COLUMNS} FROM categories WHERE name = ?", (name,)).fetchone()
    return _to_category(row) if row else None


def add_category(
    name: str, color: str, is_income: bool = False, is_active: bool = True, db_path: Path | None = None
) -> CategoryId:
    """Add a new category.

    Args:
        name: Category name (already trimmed and non-empty).
        color: Display color.
        is_income: Whether the category records income.
        is_active: Whether the category takes part in month summaries.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        The new category id.

    Raises:
        DuplicateCategory: If the name is already taken.
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        try:
            cursor = conn.execute(
                "INSERT INTO categories (name, color, is_income, is_active) VALUES (?, ?, ?, ?)",
                (name, color, int(is_income), int(is_active)),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise DuplicateCategory(name) from e
        return CategoryId(cursor.lastrowid)


def update_category(
    category_id: int,
    name: str,
    color: str | None,
    is_income: bool,
    is_active: bool,
    db_path: Path | None = None,
) -> None:
    """Update a category. A color of None keeps the current color.

    Raises:
        CategoryNotFound: If no category has this id.
        DuplicateCategory: If the new name is already taken.
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        try:
            if color is None:
                cursor = conn.execute(
                    "UPDATE categories SET name = ?, is_income = ?, is_active = ? WHERE id = ?",
                    (name, int(is_income), int(is_active), category_id),
                )
            else:
                cursor = conn.execute(
                    "UPDATE categories SET name = ?, color = ?, is_income = ?, is_active = ? WHERE id = ?",
                    (name, color, int(is_income), int(is_active), category_id),
                )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise DuplicateCategory(name) from e
        if cursor.rowcount == 0:
            raise CategoryNotFound(category_id)


def delete_category(category_id: int, db_path: Path | None = None) -> None:
    """Delete a category and its budget rows.

    Raises:
        CategoryInUse: If any transaction references the category.
        CategoryNotFound: If no category has this id.
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        try:
            (count,) = conn.execute(
                "SELECT COUNT(*) FROM transactions WHERE category_id = ?", (category_id,)
            ).fetchone()
            if count:
                raise CategoryInUse(category_id, count)
            cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
            if cursor.rowcount == 0:
                raise CategoryNotFound(category_id)
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


# Monthly budgets


def get_budgets_for_month(month: Month, db_path: Path | None = None) -> list[MonthlyBudget]:
    """Get all budget rows stored for a month.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.execute(
            "SELECT category_id, month, limit_amount FROM monthly_budgets WHERE month = ? ORDER BY category_id",
            (month,),
        )
        return [_to_budget(row) for row in cursor.fetchall()]


def get_latest_budget_before(
    category_id: int, month: Month, earliest: Month | None = None, db_path: Path | None = None
) -> MonthlyBudget | None:
    """Get the nearest budget row for a category strictly before month.

    Month keys are zero-padded YYYY-MM, so string order is calendar order.

    Args:
        category_id: Category to search.
        month: Upper bound (exclusive).
        earliest: Optional lower bound (inclusive) limiting the search.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        The most recent earlier row, or None if there is none in range.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    query = "SELECT category_id, month, limit_amount FROM monthly_budgets WHERE category_id = ? AND month < ?"
    params: list[Any] = [category_id, month]
    if earliest is not None:
        query += " AND month >= ?"
        params.append(earliest)
    query += " ORDER BY month DESC LIMIT 1"

    with _connect(db_path) as conn:
        row = conn.execute(query, params).fetchone()
    return _to_budget(row) if row else None


def insert_budget(category_id: int, month: Month, limit: int, db_path: Path | None = None) -> None:
    """Insert a new budget row.

    Raises:
        NegativeLimit: If limit is below zero.
        DuplicateBudgetRow: If a row for (category_id, month) already exists.
        sqlite3.Error: If database operation fails.
    """
    limit = validate_limit(limit)
    with _connect(db_path) as conn:
        try:
            conn.execute(
                "INSERT INTO monthly_budgets (category_id, month, limit_amount) VALUES (?, ?, ?)",
                (category_id, month, limit),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if e.sqlite_errorname != "SQLITE_CONSTRAINT_UNIQUE":
                raise
            raise DuplicateBudgetRow(category_id, month) from e


def insert_budget_if_absent(category_id: int, month: Month, limit: int, db_path: Path | None = None) -> bool:
    """Insert a budget row unless one already exists.

    A concurrent writer that got there first is not an error.

    Returns:
        True if the row was inserted, False if it already existed.

    Raises:
        NegativeLimit: If limit is below zero.
        sqlite3.Error: If database operation fails.
    """
    try:
        insert_budget(category_id, month, limit, db_path)
    except DuplicateBudgetRow:
        logger.debug("Budget row for category %s in %s already exists", category_id, month)
        return False
    return True


def set_budget(category_id: int, month: Month, limit: int, db_path: Path | None = None) -> None:
    """Set the limit for a category in a month, creating or replacing the row.

    Raises:
        NegativeLimit: If limit is below zero.
        sqlite3.Error: If database operation fails.
    """
    limit = validate_limit(limit)
    with _connect(db_path) as conn:
        try:
            conn.execute(
                """
                INSERT INTO monthly_budgets (category_id, month, limit_amount) VALUES (?, ?, ?)
                ON CONFLICT (category_id, month) DO UPDATE SET limit_amount = excluded.limit_amount
                """,
                (category_id, month, limit),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


# Transactions


def insert_transaction(
    category_id: int,
    date: str,
    amount: Money,
    card_id: int | None = None,
    notes: str | None = None,
    db_path: Path | None = None,
) -> int:
    """Insert a transaction.

    Args:
        category_id: Category the entry belongs to.
        date: Transaction date (YYYY-MM-DD).
        amount: Signed amount in cents (positive income, negative expense).
        card_id: Optional payment card.
        notes: Optional free text.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        The new transaction id.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        try:
            cursor = conn.execute(
                "INSERT INTO transactions (category_id, card_id, transaction_date, amount, notes) VALUES (?, ?, ?, ?, ?)",
                (category_id, card_id, date, amount, notes),
            )
            conn.commit()
            return cursor.lastrowid
        except sqlite3.Error:
            conn.rollback()
            raise


def update_transaction(
    transaction_id: int,
    category_id: int,
    date: str,
    amount: Money,
    card_id: int | None = None,
    notes: str | None = None,
    db_path: Path | None = None,
) -> None:
    """Replace every editable field of a transaction.

    Raises:
        TransactionNotFound: If no transaction has this id.
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        try:
            cursor = conn.execute(
                """
                UPDATE transactions
                SET category_id = ?, card_id = ?, transaction_date = ?, amount = ?, notes = ?
                WHERE id = ?
                """,
                (category_id, card_id, date, amount, notes, transaction_id),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
    if cursor.rowcount == 0:
        raise TransactionNotFound(transaction_id)


def get_transaction(transaction_id: int, db_path: Path | None = None) -> Transaction:
    """Get a transaction by id.

    Raises:
        TransactionNotFound: If no transaction has this id.
    """
    with _connect(db_path) as conn:
        row = conn.execute(
            f"SELECT {_TRANSACTION_COLUMNS} FROM transactions WHERE id = ?", (transaction_id,)
        ).fetchone()
    if row is None:
        raise TransactionNotFound(transaction_id)
    return _to_transaction(row)


def delete_transaction(transaction_id: int, db_path: Path | None = None) -> None:
    """Delete a transaction.

    Raises:
        TransactionNotFound: If no transaction has this id.
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        try:
            cursor = conn.execute("DELETE FROM transactions WHERE id = ?", (transaction_id,))
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
    if cursor.rowcount == 0:
        raise TransactionNotFound(transaction_id)


def list_transactions_for_month(month: Month, db_path: Path | None = None) -> list[Transaction]:
    """Get a month's transactions, newest first.

    Filters on the calendar month of the transaction date, not on when the
    row was created.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    since_date, until_date, _ = month_range(month)
    with _connect(db_path) as conn:
        cursor = conn.execute(
            f"""
            SELECT {_TRANSACTION_COLUMNS} FROM transactions
            WHERE transaction_date >= ? AND transaction_date < ?
            ORDER BY transaction_date DESC, id DESC
            """,
            (since_date, until_date),
        )
        return [_to_transaction(row) for row in cursor.fetchall()]


def sum_signed_by_category(month: Month, db_path: Path | None = None) -> dict[CategoryId, CategoryTotals]:
    """Sum a month's income and expenses per category.

    Returns:
        Mapping of category id to totals; expense_total is non-negative.
        Categories without transactions are absent.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    since_date, until_date, _ = month_range(month)
    with _connect(db_path) as conn:
        cursor = conn.execute(
            """
            SELECT category_id,
                   COALESCE(SUM(CASE WHEN amount > 0 THEN amount END), 0) AS income_total,
                   COALESCE(SUM(CASE WHEN amount < 0 THEN -amount END), 0) AS expense_total
            FROM transactions
            WHERE transaction_date >= ? AND transaction_date < ?
            GROUP BY category_id
            """,
            (since_date, until_date),
        )
        return {
            CategoryId(row["category_id"]): CategoryTotals(
                income_total=Money(row["income_total"]),
                expense_total=Money(row["expense_total"]),
            )
            for row in cursor.fetchall()
        }


# Cards


def get_all_cards(db_path: Path | None = None) -> list[Card]:
    """Get every card sorted by name."""
    with _connect(db_path) as conn:
        cursor = conn.execute("SELECT id, name, is_active FROM cards ORDER BY name")
        return [Card(id=row["id"], name=row["name"], is_active=bool(row["is_active"])) for row in cursor.fetchall()]


def add_card(name: str, db_path: Path | None = None) -> int:
    """Add a payment card and return its id.

    Raises:
        sqlite3.Error: If database operation fails (including a duplicate name).
    """
    with _connect(db_path) as conn:
        try:
            cursor = conn.execute("INSERT INTO cards (name) VALUES (?)", (name,))
            conn.commit()
            return cursor.lastrowid
        except sqlite3.Error:
            conn.rollback()
            raise


def set_card_active(card_id: int, is_active: bool, db_path: Path | None = None) -> bool:
    """Activate or deactivate a card.

    Returns:
        True if a card was updated.
    """
    with _connect(db_path) as conn:
        try:
            cursor = conn.execute("UPDATE cards SET is_active = ? WHERE id = ?", (int(is_active), card_id))
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        return cursor.rowcount > 0
