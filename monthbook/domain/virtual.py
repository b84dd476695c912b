"""Pure functions for virtual reporting categories.

Virtual rows never exist in the category registry. They are derived from the
aggregated rows of a month and a static rule table:
- Total Income: income summed across every row
- Tithe: a percentage of total income
- Split: one category's row replaced by named sub-buckets at fixed ratios

Ratios and percentages are Fractions so that no binary float is involved.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any

from monthbook.domain.errors import InvalidRuleConfig
from monthbook.domain.models import (
    ROW_SPLIT,
    ROW_TITHE,
    ROW_TOTAL_INCOME,
    BudgetRow,
    CategoryId,
    Money,
)

DEFAULT_TOTAL_INCOME_NAME = "Total Income"
DEFAULT_TITHE_NAME = "Tithe"
DEFAULT_TITHE_PERCENT = Fraction(10)
VIRTUAL_COLOR = "#f8f9fa"


@dataclass(frozen=True)
class TotalIncomeRule:
    """Synthesises a row holding the month's total income."""

    name: str = DEFAULT_TOTAL_INCOME_NAME


@dataclass(frozen=True)
class TitheRule:
    """Synthesises a row holding a percentage of total income."""

    name: str = DEFAULT_TITHE_NAME
    percent: Fraction = DEFAULT_TITHE_PERCENT


@dataclass(frozen=True)
class SplitBucket:
    """One named share of a split category."""

    name: str
    ratio: Fraction


@dataclass(frozen=True)
class SplitRule:
    """Replaces a source category's row with ratio-weighted sub-buckets.

    source names the category; source_id is filled in once the rule has been
    bound to the registry. The last bucket absorbs rounding residue.
    """

    source: str
    buckets: tuple[SplitBucket, ...]
    source_id: CategoryId | None = None


@dataclass(frozen=True)
class VirtualRules:
    """The full, immutable rule table."""

    total_income: TotalIncomeRule = field(default_factory=TotalIncomeRule)
    tithe: TitheRule = field(default_factory=TitheRule)
    splits: tuple[SplitRule, ...] = ()


def parse_ratio(value: Any) -> Fraction:
    """Parse a ratio or percentage given as an int or decimal string.

    Floats are rejected: "0.1" is exact, 0.1 is not.

    Raises:
        InvalidRuleConfig: If the value is not an exact number.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidRuleConfig(f"Ratio {value!r} must be an integer or a decimal string such as \"0.5\"")
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation as e:
            raise InvalidRuleConfig(f"Invalid ratio: {value!r}") from e
        if not parsed.is_finite():
            raise InvalidRuleConfig(f"Invalid ratio: {value!r}")
        return Fraction(parsed)
    raise InvalidRuleConfig(f"Invalid ratio: {value!r}")


def validate_split_rule(rule: SplitRule) -> None:
    """Check a split rule is well formed.

    Raises:
        InvalidRuleConfig: If the rule has no buckets, a blank or repeated
            bucket name, a non-positive ratio, or ratios not summing to 1.
    """
    if not rule.source.strip():
        raise InvalidRuleConfig("Split rule source category name cannot be empty")
    if not rule.buckets:
        raise InvalidRuleConfig(f"Split rule for '{rule.source}' has no buckets")

    names = [bucket.name for bucket in rule.buckets]
    if any(not name.strip() for name in names):
        raise InvalidRuleConfig(f"Split rule for '{rule.source}' has a bucket without a name")
    if len(set(names)) != len(names):
        raise InvalidRuleConfig(f"Split rule for '{rule.source}' repeats a bucket name")
    if any(bucket.ratio <= 0 for bucket in rule.buckets):
        raise InvalidRuleConfig(f"Split rule for '{rule.source}' has a ratio that is not positive")

    total = sum((bucket.ratio for bucket in rule.buckets), Fraction(0))
    if total != 1:
        raise InvalidRuleConfig(f"Split ratios for '{rule.source}' sum to {total}, expected 1")


def validate_rules(rules: VirtualRules) -> VirtualRules:
    """Validate the whole rule table once, at load time."""
    if not 0 <= rules.tithe.percent <= 100:
        raise InvalidRuleConfig(f"Tithe percent must be between 0 and 100, got {rules.tithe.percent}")
    if not rules.total_income.name.strip() or not rules.tithe.name.strip():
        raise InvalidRuleConfig("Virtual row names cannot be empty")

    sources = [rule.source for rule in rules.splits]
    if len(set(sources)) != len(sources):
        raise InvalidRuleConfig("Each category can only have one split rule")
    for rule in rules.splits:
        validate_split_rule(rule)
    return rules


def round_half_up(value: Fraction) -> int:
    """Round a non-negative exact value to the nearest integer, halves up."""
    return (value.numerator * 2 + value.denominator) // (value.denominator * 2)


def calculate_tithe(total_income: Money, percent: Fraction = DEFAULT_TITHE_PERCENT) -> Money:
    """Return percent of total income in cents, rounded half-up."""
    return Money(round_half_up(total_income * percent / 100))


def split_amount(amount: Money, ratios: Sequence[Fraction]) -> list[Money]:
    """Split an amount by ratios so the parts add back up to the cent.

    Each part is the difference between consecutive half-up rounded
    cumulative shares, so no part goes negative for a non-negative amount.
    The last part takes the residual.
    """
    parts: list[Money] = []
    cumulative = Fraction(0)
    allocated = 0
    for ratio in ratios[:-1]:
        cumulative += ratio
        rounded = round_half_up(amount * cumulative)
        parts.append(Money(rounded - allocated))
        allocated = rounded
    parts.append(Money(amount - allocated))
    return parts


def build_split_rows(source: BudgetRow, rule: SplitRule) -> list[BudgetRow]:
    """Expand a source row into one row per bucket of the rule."""
    ratios = [bucket.ratio for bucket in rule.buckets]
    limits = split_amount(source.limit, ratios)
    spent = split_amount(source.spent, ratios)
    income = split_amount(source.income, ratios)

    return [
        BudgetRow(
            name=bucket.name,
            color=source.color,
            is_income=source.is_income,
            limit=limits[i],
            spent=spent[i],
            income=income[i],
            remaining=Money(limits[i] - spent[i]),
            kind=ROW_SPLIT,
        )
        for i, bucket in enumerate(rule.buckets)
    ]


def total_income_row(rows: Iterable[BudgetRow], rule: TotalIncomeRule) -> BudgetRow:
    """Build the Total Income row from real category rows."""
    income = Money(sum(row.income for row in rows))
    return BudgetRow(
        name=rule.name,
        color=VIRTUAL_COLOR,
        is_income=True,
        limit=Money(0),
        spent=Money(0),
        income=income,
        remaining=Money(0),
        kind=ROW_TOTAL_INCOME,
    )


def tithe_row(total_income: Money, rule: TitheRule) -> BudgetRow:
    """Build the informational Tithe row."""
    return BudgetRow(
        name=rule.name,
        color=VIRTUAL_COLOR,
        is_income=True,
        limit=Money(0),
        spent=Money(0),
        income=calculate_tithe(total_income, rule.percent),
        remaining=Money(0),
        kind=ROW_TITHE,
    )


def apply_virtual_rules(rows: Sequence[BudgetRow], rules: VirtualRules) -> list[BudgetRow]:
    """Add virtual rows to an aggregated month summary.

    Output order is fixed: Total Income, Tithe, then the real rows in their
    incoming order with each split source replaced in place by its buckets.
    Split rules are matched on source_id when bound, otherwise on the source
    category name. Rules whose source is not among the rows are ignored.

    Args:
        rows: Aggregated rows of real categories.
        rules: Validated rule table.

    Returns:
        A new list; the input is not modified.
    """
    real_rows = [row for row in rows if not row.is_virtual]

    by_id: Mapping[CategoryId, SplitRule] = {r.source_id: r for r in rules.splits if r.source_id is not None}
    by_name: Mapping[str, SplitRule] = {r.source: r for r in rules.splits if r.source_id is None}

    total = total_income_row(real_rows, rules.total_income)
    result = [total, tithe_row(total.income, rules.tithe)]

    for row in real_rows:
        rule = by_id.get(row.category_id) if row.category_id is not None else None
        if rule is None:
            rule = by_name.get(row.name)
        if rule is None:
            result.append(row)
        else:
            result.extend(build_split_rows(row, rule))

    return result
