"""Admin commands for init and payment cards."""

import sqlite3
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from monthbook.config import create_default_config, get_config_path
from monthbook.store.queries import add_card, get_all_cards, set_card_active
from monthbook.store.schema import database_exists, get_db_path, init_database

console = Console()


def require_database(db_path: Path) -> None:
    """Exit with a hint when the database has not been initialised."""
    if not database_exists(db_path):
        console.print("[red]Database not found. Run 'monthbook init' first.[/red]", style="bold")
        sys.exit(1)


def run_migration(db_path: Path) -> None:
    """Bring an existing database's schema up to date."""
    console.print(f"[cyan]Updating schema of {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Database schema is up to date")


def run_full_init(db_path: Path, config_path: Path, seed: bool) -> None:
    """Initialize new database and config."""
    if db_path.exists():
        db_path.unlink()

    console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
    init_database(db_path, seed=seed)
    console.print("[green]✓[/green] Database initialized")
    if seed:
        console.print("[green]✓[/green] Default categories and cards added")

    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Database: {db_path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")


def init_command(force: bool = False, migrate: bool = False, seed: bool = True) -> None:
    """Initialize monthbook database and configuration."""
    db_path = get_db_path()
    config_path = get_config_path()

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        if migrate:
            if not db_exists:
                console.print("[red]No database found to migrate[/red]", style="bold")
                console.print(f"[dim]Expected location: {db_path}[/dim]")
                sys.exit(1)
            run_migration(db_path)
            return

        # Refuse to overwrite without force flag
        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Database already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'monthbook init --force' to overwrite[/yellow]")
            console.print("[yellow]Or 'monthbook init --migrate' to update database schema only[/yellow]")
            sys.exit(1)

        run_full_init(db_path, config_path, seed)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def cards_command(add: str | None = None, deactivate: int | None = None, activate: int | None = None) -> None:
    """List payment cards, optionally adding or (de)activating one first."""
    db_path = get_db_path()
    require_database(db_path)

    try:
        if add:
            card_id = add_card(add.strip(), db_path)
            console.print(f"[green]✓[/green] Added card {add.strip()} (ID: {card_id})")

        for card_id, active in ((deactivate, False), (activate, True)):
            if card_id is None:
                continue
            if not set_card_active(card_id, active, db_path):
                console.print(f"[red]Card {card_id} not found[/red]")
                sys.exit(1)
            console.print(f"[green]✓[/green] Card {card_id} {'activated' if active else 'deactivated'}")

        cards = get_all_cards(db_path)
        if not cards:
            console.print("[yellow]No cards found[/yellow]")
            return

        table = Table(title="Cards")
        table.add_column("ID", style="dim", justify="right")
        table.add_column("Name", style="white")
        table.add_column("Status", justify="center")
        for card in cards:
            table.add_row(str(card.id), card.name, "✓" if card.is_active else "[dim]inactive[/dim]")
        console.print(table)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
