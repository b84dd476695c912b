"""Category management commands (list, add, edit, delete)."""

import random
import sqlite3
import sys

from rich.console import Console
from rich.table import Table

from monthbook.commands.admin import require_database
from monthbook.commands.budget import resolve_category
from monthbook.domain.errors import MonthbookError
from monthbook.store.queries import add_category, delete_category, get_all_categories, update_category
from monthbook.store.schema import get_db_path

console = Console()

PASTEL_COLORS = [
    "#FFB3BA", "#FFDFBA", "#FFFFBA", "#BAFFC9", "#BAE1FF",
    "#E2F0CB", "#FDFD96", "#FFC3A0", "#FFD1DC", "#D4F0F0",
    "#CCE2CB", "#B6CFB6", "#97C1A9", "#FCB7AF", "#FFDAC1",
    "#E7FFAC", "#FFABAB", "#D5AAFF", "#85E3FF", "#B9F6CA",
]  # fmt: skip


def clean_category_name(name: str) -> str:
    """Trim a category name and reject blanks.

    Raises:
        ValueError: If the name is empty after trimming.
    """
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Category name cannot be empty")
    return cleaned


def list_categories_command() -> None:
    """List every category."""
    db_path = get_db_path()
    require_database(db_path)

    try:
        categories = get_all_categories(db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if not categories:
        console.print("[yellow]No categories yet. Add one with 'monthbook add-category'[/yellow]")
        return

    table = Table(title="Categories")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Color")
    table.add_column("Type")
    table.add_column("Status", justify="center")

    for category in categories:
        table.add_row(
            str(category.id),
            category.name,
            f"[{category.color}]■[/{category.color}] {category.color}",
            "[green]income[/green]" if category.is_income else "expense",
            "✓" if category.is_active else "[dim]inactive[/dim]",
        )

    console.print(table)


def add_category_command(name: str, income: bool = False, color: str | None = None) -> None:
    """Add a category with a random pastel color unless one is given."""
    db_path = get_db_path()
    require_database(db_path)

    try:
        cleaned = clean_category_name(name)
        chosen = color or random.choice(PASTEL_COLORS)
        category_id = add_category(cleaned, chosen, is_income=income, db_path=db_path)
        kind = "income" if income else "expense"
        console.print(f"[green]✓[/green] Added {kind} category {cleaned} (ID: {category_id})")
    except (MonthbookError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def edit_category_command(
    category: str,
    name: str | None = None,
    color: str | None = None,
    income: bool | None = None,
    active: bool | None = None,
) -> None:
    """Change any of a category's name, color, income flag or active flag."""
    db_path = get_db_path()
    require_database(db_path)

    try:
        current = resolve_category(category, db_path)
        new_name = clean_category_name(name) if name is not None else current.name
        update_category(
            current.id,
            new_name,
            color,
            current.is_income if income is None else income,
            current.is_active if active is None else active,
            db_path,
        )
        console.print(f"[green]✓[/green] Updated category {new_name}")
    except (MonthbookError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def delete_category_command(category: str) -> None:
    """Delete a category that no transaction uses."""
    db_path = get_db_path()
    require_database(db_path)

    try:
        current = resolve_category(category, db_path)
        delete_category(current.id, db_path)
        console.print(f"[green]✓[/green] Deleted category {current.name}")
    except MonthbookError as e:
        console.print(f"[red]{e}[/red]")
        console.print("[dim]Deactivate it instead with 'monthbook edit-category --inactive'[/dim]")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
