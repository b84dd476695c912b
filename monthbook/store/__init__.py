"""Database store layer - provides persistence for the application.

This module re-exports the public database functions for easy importing.
"""

from monthbook.store.ledger import SqliteLedger
from monthbook.store.queries import (
    add_card,
    add_category,
    delete_category,
    delete_transaction,
    find_category_by_name,
    get_all_cards,
    get_all_categories,
    get_budgets_for_month,
    get_category,
    get_latest_budget_before,
    get_transaction,
    insert_budget,
    insert_budget_if_absent,
    insert_transaction,
    list_active_categories,
    list_transactions_for_month,
    set_budget,
    set_card_active,
    sum_signed_by_category,
    update_category,
    update_transaction,
)
from monthbook.store.schema import database_exists, get_db_path, init_database

__all__ = [
    "SqliteLedger",
    # Schema
    "database_exists",
    "get_db_path",
    "init_database",
    # Queries
    "add_card",
    "add_category",
    "delete_category",
    "delete_transaction",
    "find_category_by_name",
    "get_all_cards",
    "get_all_categories",
    "get_budgets_for_month",
    "get_category",
    "get_latest_budget_before",
    "get_transaction",
    "insert_budget",
    "insert_budget_if_absent",
    "insert_transaction",
    "list_active_categories",
    "list_transactions_for_month",
    "set_budget",
    "set_card_active",
    "sum_signed_by_category",
    "update_category",
    "update_transaction",
]
