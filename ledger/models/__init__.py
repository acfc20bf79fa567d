"""
Data Models Package

This package contains all Pydantic models used in the Personal Ledger.
All data flowing through the system must conform to these schemas.
"""

from ledger.models.transaction import (
    MONTH_LABELS,
    MonthlySummary,
    PeriodFilter,
    Summary,
    Transaction,
    TransactionCreate,
    TransactionResponse,
    TransactionType,
    parse_ledger_date,
)
from ledger.models.user import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    User,
)
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "MONTH_LABELS",
    "MonthlySummary",
    "PeriodFilter",
    "Summary",
    "Transaction",
    "TransactionCreate",
    "TransactionResponse",
    "TransactionType",
    "parse_ledger_date",
    # User models
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "TokenResponse",
    "User",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
