"""Database schema initialization and seeding."""

import os
import sqlite3
from pathlib import Path

# Seeded by `monthbook init` unless --no-seed is given: (name, color, is_income)
DEFAULT_CATEGORIES: list[tuple[str, str, bool]] = [
    ("Salary", "#BAFFC9", True),
    ("Rent", "#BAE1FF", False),
    ("Groceries", "#FFB3BA", False),
    ("Fast Food", "#FFDFBA", False),
    ("Phone", "#FFFFBA", False),
    ("Health", "#D4F0F0", False),
    ("Subscriptions", "#D5AAFF", False),
    ("Tithing", "#E7FFAC", False),
    ("Other", "#f8f9fa", False),
]

DEFAULT_CARDS: list[str] = ["Debit", "Credit"]


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the database path (MONTHBOOK_DB, else XDG compliant default)."""
    override = os.environ.get("MONTHBOOK_DB")
    if override:
        return Path(override).expanduser()
    return get_xdg_data_home() / "monthbook" / "monthbook.db"


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    return db_path.exists()


def init_database(db_path: Path | None = None, seed: bool = False) -> None:
    """Initialize the database with the required schema.

    Safe to run on an existing database; tables and indexes are only created
    when missing and seed rows are skipped when their name already exists.

    Args:
        db_path: Path to the database file. If None, uses default location.
        seed: Insert the default categories and cards.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                color TEXT NOT NULL DEFAULT '#f8f9fa',
                is_income INTEGER NOT NULL DEFAULT 0,
                is_active INTEGER NOT NULL DEFAULT 1
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS cards (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                is_active INTEGER NOT NULL DEFAULT 1
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS monthly_budgets (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                category_id INTEGER NOT NULL,
                month TEXT NOT NULL,
                limit_amount INTEGER NOT NULL DEFAULT 0 CHECK (limit_amount >= 0),
                UNIQUE (category_id, month),
                FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE CASCADE
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                category_id INTEGER NOT NULL,
                card_id INTEGER,
                transaction_date TEXT NOT NULL,
                amount INTEGER NOT NULL,
                notes TEXT,
                created_at TEXT NOT NULL DEFAULT (datetime('now')),
                FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE RESTRICT,
                FOREIGN KEY (card_id) REFERENCES cards(id) ON DELETE SET NULL
            )
        """
        )

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_date ON transactions(transaction_date)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_category ON transactions(category_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_card ON transactions(card_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_budgets_month ON monthly_budgets(month)")

        if seed:
            cursor.executemany(
                "INSERT OR IGNORE INTO categories (name, color, is_income) VALUES (?, ?, ?)",
                [(name, color, int(is_income)) for name, color, is_income in DEFAULT_CATEGORIES],
            )
            cursor.executemany(
                "INSERT OR IGNORE INTO cards (name) VALUES (?)",
                [(name,) for name in DEFAULT_CARDS],
            )

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
