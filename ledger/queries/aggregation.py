"""
Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and runs over the exact
sequence the ledger store returned for the caller. It never queries
storage itself, so it cannot see another user's rows.

Two views are derived, never stored:
1. Summary: total income, total expense, balance
2. Monthly breakdown: always twelve buckets, January first

GUARANTEES:
- balance == total_income - total_expense exactly (Decimal arithmetic)
- Months without transactions report zero, they are never omitted
- A value that cannot be read as a number counts as zero
- A date that does not parse as YYYY-MM-DD is left out entirely
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Union

from ledger.models.transaction import (
    MONTH_LABELS,
    MonthlySummary,
    Summary,
    Transaction,
    TransactionType,
    parse_ledger_date,
)


ZERO = Decimal("0")

# The numeric shapes a backend may hand back for a stored amount.
Amount = Union[int, float, Decimal]


def normalize_amount(value: Union[Amount, str, None]) -> Decimal:
    """
    Convert a backend numeric value to Decimal.

    Accepts int, float, Decimal and numeric text. Anything else, and any
    non-finite value, becomes zero instead of aborting the aggregation.
    """
    if isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # Via str() so 0.1 stays 0.1 rather than its binary expansion.
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not result.is_finite():
        return ZERO
    return result


def summarize(transactions: Iterable[Transaction]) -> Summary:
    """
    Total income, total expense and balance. Empty input gives zeros.

    Undated (unparsable) rows are skipped here too, so a year's summary
    always equals the sum of its twelve monthly buckets.
    """
    total_income = ZERO
    total_expense = ZERO

    for tx in transactions:
        if parse_ledger_date(tx.date) is None:
            continue
        amount = normalize_amount(tx.amount)
        if tx.type == TransactionType.INCOME:
            total_income += amount
        elif tx.type == TransactionType.EXPENSE:
            total_expense += amount

    return Summary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
    )


def monthly_breakdown(
    transactions: Iterable[Transaction],
    year: int,
) -> list[MonthlySummary]:
    """
    Income and expense per calendar month of `year`.

    Transactions dated outside `year`, or whose date does not parse,
    are ignored. The result always has exactly twelve entries.
    """
    if year is None:
        raise ValueError("year is required for a monthly breakdown")

    income = [ZERO] * 12
    expense = [ZERO] * 12

    for tx in transactions:
        parsed = parse_ledger_date(tx.date)
        if parsed is None or parsed.year != year:
            continue

        amount = normalize_amount(tx.amount)
        index = parsed.month - 1
        if tx.type == TransactionType.INCOME:
            income[index] += amount
        elif tx.type == TransactionType.EXPENSE:
            expense[index] += amount

    return [
        MonthlySummary(month=label, income=income[i], expense=expense[i])
        for i, label in enumerate(MONTH_LABELS)
    ]

