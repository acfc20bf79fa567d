"""
Tests for the Aggregation Engine.

Aggregates are pure functions over a list of transactions, so these
tests build the list directly and never touch storage.
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from ledger.models.transaction import MONTH_LABELS, Transaction, TransactionType
from ledger.queries import monthly_breakdown, normalize_amount, summarize


OWNER = uuid4()


def make_tx(amount, date: str, tx_type: str = "expense", description: str = "Item") -> Transaction:
    return Transaction(
        id=uuid4(),
        owner_id=OWNER,
        description=description,
        amount=amount,
        date=date,
        type=tx_type,
    )


def make_raw_tx(amount, date: str, tx_type: TransactionType) -> Transaction:
    """A transaction as a loose backend might hand it back, unvalidated."""
    return Transaction.model_construct(
        id=uuid4(),
        owner_id=OWNER,
        description="Raw",
        amount=amount,
        date=date,
        type=tx_type,
    )


class TestNormalizeAmount:
    """Tests for numeric normalization."""

    @pytest.mark.parametrize("value, expected", [
        (25000, Decimal("25000")),
        (0.1, Decimal("0.1")),
        (Decimal("12.34"), Decimal("12.34")),
        ("99.50", Decimal("99.50")),
        (" 7 ", Decimal("7")),
    ])
    def test_numeric_shapes(self, value, expected):
        assert normalize_amount(value) == expected

    @pytest.mark.parametrize("value", [None, "abc", "", True, [1], {"$numberInt": "5"}])
    def test_unreadable_values_count_as_zero(self, value):
        assert normalize_amount(value) == Decimal("0")

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "Infinity", Decimal("NaN")])
    def test_non_finite_values_count_as_zero(self, value):
        assert normalize_amount(value) == Decimal("0")


class TestSummarize:
    """Tests for the income/expense/balance summary."""

    def test_empty_input_gives_zeros(self):
        summary = summarize([])
        assert summary.total_income == 0
        assert summary.total_expense == 0
        assert summary.balance == 0

    def test_single_expense(self):
        summary = summarize([make_tx(25000, "2025-09-18", "expense", "Coffee")])
        assert summary.total_income == 0
        assert summary.total_expense == 25000
        assert summary.balance == -25000

    def test_balance_identity(self):
        transactions = [
            make_tx(Decimal("1000.10"), "2025-01-05", "income"),
            make_tx(Decimal("0.20"), "2025-01-06", "income"),
            make_tx(Decimal("300.05"), "2025-02-01", "expense"),
            make_tx(Decimal("0.1"), "2025-03-01", "expense"),
        ]
        summary = summarize(transactions)
        assert summary.total_income == Decimal("1000.30")
        assert summary.total_expense == Decimal("300.15")
        assert summary.balance == summary.total_income - summary.total_expense

    def test_garbage_amount_counts_as_zero(self):
        transactions = [
            make_tx(100, "2025-01-01", "income"),
            make_raw_tx("not a number", "2025-01-02", TransactionType.INCOME),
            make_raw_tx(None, "2025-01-03", TransactionType.EXPENSE),
        ]
        summary = summarize(transactions)
        assert summary.total_income == 100
        assert summary.total_expense == 0

    def test_unparsable_dates_are_skipped(self):
        transactions = [
            make_tx(100, "2025-01-01", "income"),
            make_raw_tx(Decimal("50"), "garbage", TransactionType.INCOME),
            make_raw_tx(Decimal("70"), "2025-13-01", TransactionType.EXPENSE),
        ]
        summary = summarize(transactions)
        assert summary.total_income == 100
        assert summary.total_expense == 0

    def test_order_does_not_matter(self):
        transactions = [
            make_tx(10, "2025-01-01", "income"),
            make_tx(3, "2025-02-01", "expense"),
            make_tx(5, "2024-12-31", "income"),
        ]
        assert summarize(transactions) == summarize(list(reversed(transactions)))


class TestMonthlyBreakdown:
    """Tests for the twelve-bucket monthly view."""

    def test_always_twelve_buckets_in_order(self):
        buckets = monthly_breakdown([], 2025)
        assert [b.month for b in buckets] == list(MONTH_LABELS)
        assert all(b.income == 0 and b.expense == 0 for b in buckets)

    def test_coffee_lands_in_september(self):
        buckets = monthly_breakdown([make_tx(25000, "2025-09-18", "expense", "Coffee")], 2025)
        september = buckets[8]
        assert september.month == "Sep"
        assert september.expense == 25000
        assert september.income == 0
        assert sum(b.expense for b in buckets) == 25000

    def test_other_years_are_ignored(self):
        transactions = [
            make_tx(10, "2024-09-18", "income"),
            make_tx(20, "2026-09-18", "income"),
        ]
        buckets = monthly_breakdown(transactions, 2025)
        assert all(b.income == 0 for b in buckets)

    def test_unparsable_dates_are_ignored(self):
        transactions = [
            make_raw_tx(Decimal("10"), "2025-09", TransactionType.INCOME),
            make_raw_tx(Decimal("10"), "", TransactionType.INCOME),
        ]
        buckets = monthly_breakdown(transactions, 2025)
        assert all(b.income == 0 for b in buckets)

    def test_buckets_add_up_to_the_year_summary(self):
        transactions = [
            make_tx(Decimal("100.25"), "2025-01-31", "income"),
            make_tx(Decimal("40"), "2025-01-01", "expense"),
            make_tx(Decimal("7.5"), "2025-06-15", "expense"),
            make_tx(Decimal("2000"), "2025-12-31", "income"),
            make_raw_tx(Decimal("999"), "bad-date", TransactionType.INCOME),
        ]
        buckets = monthly_breakdown(transactions, 2025)
        summary = summarize(transactions)
        assert sum(b.income for b in buckets) == summary.total_income
        assert sum(b.expense for b in buckets) == summary.total_expense

    def test_year_is_required(self):
        with pytest.raises(ValueError):
            monthly_breakdown([], None)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
