"""CLI entry point for monthbook."""

import typer

from monthbook.commands.admin import cards_command, init_command
from monthbook.commands.budget import month_command, set_limit_command
from monthbook.commands.categories import (
    add_category_command,
    delete_category_command,
    edit_category_command,
    list_categories_command,
)
from monthbook.commands.transactions import add_command, delete_command, edit_command, list_command
from monthbook.logs import configure_logging

app = typer.Typer(
    name="monthbook",
    help="Monthbook - monthly budgets that roll over by themselves",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Monthbook - monthly budgets that roll over by themselves."""
    configure_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
    migrate: bool = typer.Option(False, "--migrate", help="Update the database schema only"),
    seed: bool = typer.Option(True, "--seed/--no-seed", help="Add default categories and cards"),
) -> None:
    """Initialize monthbook database and configuration."""
    init_command(force, migrate, seed)


@app.command(name="month")
def month(
    month: str = typer.Argument(None, help="Month to show (YYYY-MM, default: current month)"),
    transactions: bool = typer.Option(True, "--transactions/--no-transactions", help="List the month's entries"),
) -> None:
    """Show a month's budget, rolling limits over from earlier months."""
    month_command(month, transactions)


@app.command(name="set-limit")
def set_limit(
    category: str,
    amount: str,
    month: str = typer.Option(None, "--month", help="Month to set (YYYY-MM, default: current month)"),
) -> None:
    """Set a category's spending limit for a month."""
    set_limit_command(category, amount, month)


@app.command(name="categories")
def categories() -> None:
    """List your categories."""
    list_categories_command()


@app.command(name="add-category")
def add_category(
    name: str,
    income: bool = typer.Option(False, "--income", help="Money coming in rather than going out"),
    color: str = typer.Option(None, "--color", help="Hex color (default: random pastel)"),
) -> None:
    """Add a category."""
    add_category_command(name, income, color)


@app.command(name="edit-category")
def edit_category(
    category: str,
    name: str = typer.Option(None, "--name", help="New name"),
    color: str = typer.Option(None, "--color", help="New hex color"),
    income: bool = typer.Option(None, "--income/--expense", help="Change the category type"),
    active: bool = typer.Option(None, "--active/--inactive", help="Show or hide in month views"),
) -> None:
    """Edit a category (by id or name)."""
    edit_category_command(category, name, color, income, active)


@app.command(name="delete-category")
def delete_category(category: str) -> None:
    """Delete a category that has no transactions."""
    delete_category_command(category)


@app.command(name="add")
def add(
    date: str,
    category: str,
    amount: str,
    card: str = typer.Option(None, "--card", help="Card id or name (default: cash)"),
    notes: str = typer.Option(None, "--notes", "-n", help="Free text"),
) -> None:
    """Add a transaction; the sign follows the category type."""
    add_command(date, category, amount, card, notes)


@app.command(name="edit")
def edit(
    transaction_id: int,
    date: str = typer.Option(None, "--date", help="New date"),
    category: str = typer.Option(None, "--category", help="New category id or name"),
    amount: str = typer.Option(None, "--amount", help="New amount"),
    card: str = typer.Option(None, "--card", help="New card id or name"),
    notes: str = typer.Option(None, "--notes", "-n", help="New notes"),
) -> None:
    """Edit a transaction."""
    edit_command(transaction_id, date, category, amount, card, notes)


@app.command(name="delete")
def delete(transaction_id: int) -> None:
    """Delete a transaction."""
    delete_command(transaction_id)


@app.command(name="list")
def list_transactions(
    month: str = typer.Option(None, "--month", help="Month to list (YYYY-MM, default: current month)"),
) -> None:
    """List a month's transactions."""
    list_command(month)


@app.command(name="cards")
def cards(
    add: str = typer.Option(None, "--add", help="Add a card with this name"),
    deactivate: int = typer.Option(None, "--deactivate", help="Deactivate the card with this id"),
    activate: int = typer.Option(None, "--activate", help="Activate the card with this id"),
) -> None:
    """List, add, or (de)activate payment cards."""
    cards_command(add, deactivate, activate)


if __name__ == "__main__":
    app()
