"""Aggregation package."""

from ledger.queries.aggregation import monthly_breakdown, normalize_amount, summarize

__all__ = ["monthly_breakdown", "normalize_amount", "summarize"]
