"""Month view and budget limit commands."""

import sqlite3
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from monthbook.commands.admin import require_database
from monthbook.config import get_max_lookback, load_config, load_virtual_rules
from monthbook.dates import current_month, month_range, parse_month
from monthbook.domain.budget import format_money, parse_money
from monthbook.domain.errors import CategoryNotFound, MonthbookError
from monthbook.domain.models import BudgetRow, Category, Month, Transaction
from monthbook.engine import MonthView, build_month_view
from monthbook.store.ledger import SqliteLedger
from monthbook.store.queries import (
    find_category_by_name,
    get_all_cards,
    get_all_categories,
    get_category,
    set_budget,
)
from monthbook.store.schema import get_db_path

console = Console()


def resolve_category(ref: str, db_path: Path | None = None) -> Category:
    """Look a category up by id or exact name.

    Raises:
        CategoryNotFound: If nothing matches.
    """
    if ref.isdigit():
        return get_category(int(ref), db_path)
    category = find_category_by_name(ref, db_path)
    if category is None:
        raise CategoryNotFound(ref)
    return category


def format_remaining(row: BudgetRow) -> str:
    """Colour the remaining figure: red when overspent, dim when untouched."""
    if row.is_income_only:
        return "[dim]-[/dim]"
    if row.remaining < 0:
        return f"[red]{format_money(row.remaining)}[/red]"
    if row.spent == 0:
        return f"[dim]{format_money(row.remaining)}[/dim]"
    return f"[green]{format_money(row.remaining)}[/green]"


def render_overview(view: MonthView, label: str) -> None:
    """Print the month's income, expenses and net."""
    overview = view.overview
    console.print(f"[bold cyan]{label}[/bold cyan]\n")
    console.print(f"[bold]Income:[/bold]   [green]{format_money(overview.total_income)}[/green]")
    console.print(f"[bold]Expenses:[/bold] [red]{format_money(overview.total_expenses)}[/red]")
    net_style = "green" if overview.net >= 0 else "red"
    console.print(f"[bold]Net:[/bold]      [{net_style}]{format_money(overview.net)}[/{net_style}]\n")


def render_budget_table(rows: list[BudgetRow]) -> None:
    """Print category and virtual rows in engine order."""
    table = Table(show_header=True, header_style="bold", title="Budget")
    table.add_column("Category", style="white")
    table.add_column("Limit", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Income", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("%", justify="right")

    for row in rows:
        name = f"[italic]{row.name}[/italic]" if row.is_virtual else row.name
        if row.is_income_only:
            income = f"[green]{format_money(row.income)}[/green]"
            table.add_row(name, "[dim]-[/dim]", "[dim]-[/dim]", income, "[dim]-[/dim]", "")
            continue
        percent = f"{row.percent_spent}%" if row.limit else ""
        table.add_row(
            name,
            format_money(row.limit),
            format_money(row.spent),
            format_money(row.income) if row.income else "[dim]-[/dim]",
            format_remaining(row),
            f"[red]{percent}[/red]" if row.is_over_budget else percent,
        )

    console.print(table)


def render_transactions(transactions: list[Transaction], categories: dict[int, str], cards: dict[int, str]) -> None:
    """Print the month's transactions, newest first."""
    if not transactions:
        console.print("\n[dim]No transactions this month[/dim]")
        return

    table = Table(show_header=True, header_style="bold", title="Transactions")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Card", style="dim")
    table.add_column("Amount", justify="right")
    table.add_column("Notes")

    for txn in transactions:
        amount = format_money(txn.amount)
        amount_display = f"[green]+{amount}[/green]" if txn.is_income else f"[red]{amount}[/red]"
        table.add_row(
            str(txn.id),
            txn.date,
            categories.get(txn.category_id, "Unknown"),
            cards.get(txn.card_id, "Cash") if txn.card_id is not None else "Cash",
            amount_display,
            txn.notes or "",
        )

    console.print()
    console.print(table)


def month_command(month: str | None = None, show_transactions: bool = True) -> None:
    """Show the budget view for a month, rolling limits over when needed."""
    db_path = get_db_path()
    require_database(db_path)

    try:
        target = parse_month(month) if month else current_month()
        _, _, label = month_range(target)
        config = load_config()
        rules = load_virtual_rules(config)
        ledger = SqliteLedger(db_path)

        view = build_month_view(target, ledger, ledger, ledger, rules, get_max_lookback(config))

        if view.created:
            console.print(f"[dim]Rolled over {view.created} budget limit(s) into {label}[/dim]\n")

        render_overview(view, label)
        render_budget_table(view.rows)

        if show_transactions:
            categories = {c.id: c.name for c in get_all_categories(db_path)}
            cards = {c.id: c.name for c in get_all_cards(db_path)}
            render_transactions(view.transactions, categories, cards)

    except MonthbookError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def set_limit_command(category: str, amount: str, month: str | None = None) -> None:
    """Set a category's spending limit for a month."""
    db_path = get_db_path()
    require_database(db_path)

    try:
        target: Month = parse_month(month) if month else current_month()
        limit = parse_money(amount)
        cat = resolve_category(category, db_path)
        set_budget(cat.id, target, limit, db_path)

        _, _, label = month_range(target)
        console.print(f"[green]✓ {cat.name} limit for {label}: {format_money(limit)}[/green]")

    except MonthbookError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
