"""Transaction management commands (add, edit, delete, list)."""

import sqlite3
import sys
from pathlib import Path

import pandas as pd
from rich.console import Console

from monthbook.commands.admin import require_database
from monthbook.commands.budget import render_transactions, resolve_category
from monthbook.dates import current_month, month_range, parse_month
from monthbook.domain.budget import format_money, parse_money, signed_amount
from monthbook.domain.errors import MonthbookError
from monthbook.domain.models import Category
from monthbook.store.queries import (
    delete_transaction,
    get_all_cards,
    get_all_categories,
    get_transaction,
    insert_transaction,
    list_transactions_for_month,
    update_transaction,
)
from monthbook.store.schema import get_db_path

console = Console()


def normalize_date(date: str) -> str:
    """Normalize a user date to YYYY-MM-DD.

    ISO dates (YYYY-MM-DD) are read as year, month, day. Anything else, such
    as DD/MM/YYYY or DD-MM-YYYY, is read day first.

    Raises:
        ValueError: If pandas cannot parse the date.
    """
    try:
        return pd.to_datetime(date, format="ISO8601").strftime("%Y-%m-%d")
    except (ValueError, OverflowError):
        pass

    try:
        return pd.to_datetime(date, dayfirst=True).strftime("%Y-%m-%d")
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid date format: {date}") from e


def resolve_card(ref: str | None, db_path: Path) -> int | None:
    """Look a card up by id or exact name; None means cash."""
    if ref is None:
        return None
    for card in get_all_cards(db_path):
        if str(card.id) == ref or card.name == ref:
            return card.id
    raise ValueError(f"Card not found: {ref}")


def _describe(category: Category, date: str, amount: int, notes: str | None) -> None:
    console.print(f"  Date: {date}")
    console.print(f"  Category: {category.name}")
    console.print(f"  Amount: {format_money(amount)}")
    if notes:
        console.print(f"  Notes: {notes}")


def add_command(
    date: str,
    category: str,
    amount: str,
    card: str | None = None,
    notes: str | None = None,
) -> None:
    """Record a transaction.

    The amount is given unsigned; its sign follows the category, positive
    for income categories and negative otherwise.

    Args:
        date: Transaction date (YYYY-MM-DD, DD/MM/YYYY, or other formats).
        category: Category id or name.
        amount: Amount in major units, e.g. "12.50".
        card: Optional card id or name.
        notes: Optional free text.
    """
    db_path = get_db_path()
    require_database(db_path)

    try:
        normalized_date = normalize_date(date)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        console.print("[dim]Accepted formats: YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY, etc.[/dim]")
        sys.exit(1)

    try:
        cat = resolve_category(category, db_path)
        value = signed_amount(parse_money(amount), cat.is_income)
        card_id = resolve_card(card, db_path)
        transaction_id = insert_transaction(cat.id, normalized_date, value, card_id, notes, db_path)

        console.print(f"[green]✓[/green] Transaction added (ID: {transaction_id}):")
        _describe(cat, normalized_date, value, notes)

    except (MonthbookError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def edit_command(
    transaction_id: int,
    date: str | None = None,
    category: str | None = None,
    amount: str | None = None,
    card: str | None = None,
    notes: str | None = None,
) -> None:
    """Change fields of an existing transaction.

    Changing the category re-signs the amount to match the new category.
    """
    db_path = get_db_path()
    require_database(db_path)

    try:
        current = get_transaction(transaction_id, db_path)
        new_date = normalize_date(date) if date is not None else current.date
        cat = resolve_category(category if category is not None else str(current.category_id), db_path)
        unsigned = parse_money(amount) if amount is not None else abs(current.amount)
        value = signed_amount(unsigned, cat.is_income)
        card_id = resolve_card(card, db_path) if card is not None else current.card_id
        new_notes = notes if notes is not None else current.notes

        update_transaction(transaction_id, cat.id, new_date, value, card_id, new_notes, db_path)

        console.print(f"[green]✓[/green] Transaction {transaction_id} updated:")
        _describe(cat, new_date, value, new_notes)

    except (MonthbookError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def delete_command(transaction_id: int) -> None:
    """Delete a transaction."""
    db_path = get_db_path()
    require_database(db_path)

    try:
        delete_transaction(transaction_id, db_path)
        console.print(f"[green]✓[/green] Transaction {transaction_id} deleted")
    except MonthbookError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def list_command(month: str | None = None) -> None:
    """List a month's transactions without resolving budgets."""
    db_path = get_db_path()
    require_database(db_path)

    try:
        target = parse_month(month) if month else current_month()
        _, _, label = month_range(target)
        transactions = list_transactions_for_month(target, db_path)
        categories = {c.id: c.name for c in get_all_categories(db_path)}
        cards = {c.id: c.name for c in get_all_cards(db_path)}
    except MonthbookError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[bold cyan]{label}[/bold cyan]")
    render_transactions(transactions, categories, cards)
