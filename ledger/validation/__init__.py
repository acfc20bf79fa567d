"""Request validation package."""

from ledger.validation.validator import (
    ValidationError,
    parse_month,
    parse_period,
    parse_transaction_id,
    parse_year,
    require_period,
)

__all__ = [
    "ValidationError",
    "parse_month",
    "parse_period",
    "parse_transaction_id",
    "parse_year",
    "require_period",
]
