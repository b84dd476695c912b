"""Exception hierarchy for monthbook.

Store and transport failures are not wrapped: sqlite3.Error propagates
unchanged from the store layer.
"""


class MonthbookError(Exception):
    """Base class for all monthbook errors."""


class InvalidMonthFormat(MonthbookError, ValueError):
    """Month key is not a valid YYYY-MM calendar month."""

    def __init__(self, month: object) -> None:
        super().__init__(f"Invalid month '{month}'. Expected YYYY-MM")
        self.month = month


class CategoryNotFound(MonthbookError, LookupError):
    """A referenced category does not exist."""

    def __init__(self, category: object) -> None:
        super().__init__(f"Category not found: {category}")
        self.category = category


class CategoryInUse(MonthbookError):
    """Category cannot be deleted while transactions reference it."""

    def __init__(self, category_id: int, transaction_count: int) -> None:
        super().__init__(f"Category {category_id} is used by {transaction_count} transaction(s)")
        self.category_id = category_id
        self.transaction_count = transaction_count


class DuplicateCategory(MonthbookError):
    """A category with the same name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Category already exists: {name}")
        self.name = name


class DuplicateBudgetRow(MonthbookError):
    """A budget row for (category_id, month) already exists."""

    def __init__(self, category_id: int, month: str) -> None:
        super().__init__(f"Budget for category {category_id} in {month} already exists")
        self.category_id = category_id
        self.month = month


class NegativeLimit(MonthbookError, ValueError):
    """A budget limit below zero was offered for writing."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Limit cannot be negative: {limit}")
        self.limit = limit


class InvalidAmount(MonthbookError, ValueError):
    """Money input could not be parsed."""


class TransactionNotFound(MonthbookError, LookupError):
    """A referenced transaction does not exist."""

    def __init__(self, transaction_id: int) -> None:
        super().__init__(f"Transaction {transaction_id} not found")
        self.transaction_id = transaction_id


class InvalidRuleConfig(MonthbookError, ValueError):
    """Virtual category rules in the configuration are malformed."""
