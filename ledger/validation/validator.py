"""
Request Validation

DESIGN DECISION: Query-string and path values are validated here, before
any storage call, and rejected with a ValidationError (HTTP 400).

Filter semantics:
- No `year`: no date restriction. `month` is then ignored.
- `year` only, or `month=all`: the whole calendar year.
- `year` + `month`: that single month. "9" and "09" mean the same month.

An absent parameter is never confused with an empty or zero one:
`year=` and `month=0` are errors, not "no filter".

IMPORTANT: Validation never silently fixes bad input beyond the
documented month normalization.
"""

import re
from typing import Optional
from uuid import UUID

from ledger.models.transaction import PeriodFilter


YEAR_PATTERN = re.compile(r"^\d{4}$")
MONTH_PATTERN = re.compile(r"^\d{1,2}$")
ALL_MONTHS = "all"


class ValidationError(Exception):
    """Malformed client input. The message is safe to return to the caller."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


def parse_year(year: Optional[str]) -> Optional[int]:
    """Parse a 4-digit year. None means the parameter was absent."""
    if year is None:
        return None
    value = year.strip()
    if not YEAR_PATTERN.match(value) or int(value) == 0:
        raise ValidationError("Parameter 'year' must be a 4-digit year", field="year")
    return int(value)


def parse_month(month: Optional[str]) -> Optional[int]:
    """Parse a 1-2 digit month, or the sentinel 'all' (returned as None)."""
    if month is None:
        return None
    value = month.strip().lower()
    if value == ALL_MONTHS:
        return None
    if not MONTH_PATTERN.match(value) or not 1 <= int(value) <= 12:
        raise ValidationError(
            "Parameter 'month' must be 1-12 or 'all'",
            field="month",
        )
    return int(value)


def parse_period(year: Optional[str], month: Optional[str]) -> PeriodFilter:
    """Build the period filter for list and summary requests."""
    parsed_year = parse_year(year)
    parsed_month = parse_month(month)
    if parsed_year is None:
        # Without a year there is nothing to anchor the month to.
        return PeriodFilter()
    return PeriodFilter(year=parsed_year, month=parsed_month)


def require_period(year: Optional[str], month: Optional[str]) -> PeriodFilter:
    """Like parse_period, but `year` is mandatory (monthly breakdown)."""
    if year is None or not year.strip():
        raise ValidationError("Parameter 'year' is required", field="year")
    return parse_period(year, month)


def parse_transaction_id(raw: str) -> UUID:
    """Parse a transaction id taken from the final path segment."""
    try:
        return UUID(raw.strip())
    except (AttributeError, ValueError) as e:
        raise ValidationError("Invalid transaction id", field="id") from e
