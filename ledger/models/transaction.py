"""
Core Ledger Models

These models define the strict schemas for ledger data:
1. What a client may submit when recording a transaction
2. What a stored transaction looks like
3. The derived Summary and MonthlySummary views

DESIGN DECISION: Dates are kept as `YYYY-MM-DD` text, exactly as stored.
Period filtering and month bucketing rely on that fixed textual convention,
so a value that fails to parse can be detected and excluded instead of
being silently coerced.
"""

import re
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


DATE_FORMAT = "%Y-%m-%d"
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Month labels as shown by the client, January first.
MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "Mei", "Jun",
    "Jul", "Agu", "Sep", "Okt", "Nov", "Des",
)


class TransactionType(str, Enum):
    """
    Direction of a transaction.

    Closed enumeration: anything else is rejected before it reaches storage.
    """
    INCOME = "income"
    EXPENSE = "expense"


def parse_ledger_date(value: str) -> Optional[datetime]:
    """Parse a `YYYY-MM-DD` string, returning None when it does not match."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return None


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionCreate(BaseModel):
    """
    Transaction as submitted by a client.

    Any `id` or owner field in the payload is ignored: the store assigns
    the id and the owner always comes from the verified token.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Human description, e.g. 'Coffee'"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative currency amount"
    )
    date: str = Field(
        ...,
        description="Calendar day in YYYY-MM-DD format"
    )
    type: TransactionType = Field(
        ...,
        description="income or expense"
    )

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        if parse_ledger_date(v) is None:
            raise ValueError("Date must be a valid calendar day in YYYY-MM-DD format")
        return v


class Transaction(BaseModel):
    """A stored transaction. Owned by exactly one user."""

    id: UUID
    owner_id: UUID
    description: str
    amount: Decimal
    date: str
    type: TransactionType


class TransactionResponse(BaseModel):
    """A transaction as returned to its owner. The owner id is not echoed back."""

    id: UUID
    description: str
    amount: float
    date: str
    type: TransactionType


class PeriodFilter(BaseModel):
    """
    Optional year/month restriction on a ledger query.

    No year means no date restriction at all. A month is only meaningful
    together with a year.
    """

    year: Optional[int] = Field(default=None, ge=1, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)

    @property
    def date_prefix(self) -> Optional[str]:
        """Leading part of a `YYYY-MM-DD` date that every match shares."""
        if self.year is None:
            return None
        if self.month is None:
            return f"{self.year:04d}"
        return f"{self.year:04d}-{self.month:02d}"


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class Summary(BaseModel):
    """Running totals over a filtered set of transactions."""
    model_config = ConfigDict(populate_by_name=True)

    total_income: Decimal = Field(default=Decimal("0"), alias="totalIncome")
    total_expense: Decimal = Field(default=Decimal("0"), alias="totalExpense")
    balance: Decimal = Field(default=Decimal("0"))

    @field_serializer("total_income", "total_expense", "balance")
    def serialize_totals(self, value: Decimal) -> float:
        return float(value)


class MonthlySummary(BaseModel):
    """Income and expense totals for one calendar month."""

    month: str
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @field_serializer("income", "expense")
    def serialize_totals(self, value: Decimal) -> float:
        return float(value)
