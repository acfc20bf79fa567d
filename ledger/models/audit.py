"""
Audit Models for Personal Ledger

Every significant action in the system produces an audit event:
1. Who registered or logged in (and who failed to)
2. Which transactions were recorded or removed
3. Which aggregates were computed
4. Which backend failures were hidden behind an opaque 500

DESIGN DECISION: Events never carry secrets. Passwords, hashes and
tokens stay out of `details`.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    USER_REGISTERED = "user_registered"
    REGISTRATION_REJECTED = "registration_rejected"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    TOKEN_REJECTED = "token_rejected"

    # Ledger
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_DELETED = "transaction_deleted"
    DELETE_REFUSED = "delete_refused"

    # Aggregation
    SUMMARY_COMPUTED = "summary_computed"

    # System events
    STORE_ERROR = "store_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - who and what is this about?
    user_id: Optional[UUID] = Field(
        default=None,
        description="Authenticated caller, when known"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'transaction')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": str(self.user_id) if self.user_id else None,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_registered(user_id, username)
        event = AuditEventBuilder.transaction_deleted(user_id, transaction_id)
    """

    @staticmethod
    def user_registered(user_id: UUID, username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"User registered: {username}",
            details={"username": username},
        )

    @staticmethod
    def registration_rejected(username: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description=f"Registration rejected for {username}: {reason}",
            details={"username": username, "reason": reason},
        )

    @staticmethod
    def login_succeeded(user_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="Login succeeded, token issued",
        )

    @staticmethod
    def login_failed(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description="Login failed: invalid credentials",
            details={"email": email},
        )

    @staticmethod
    def token_rejected(kind: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TOKEN_REJECTED,
            severity=AuditSeverity.WARNING,
            description=f"Token rejected: {kind}",
            details={"kind": kind},
        )

    @staticmethod
    def transaction_created(
        user_id: UUID,
        transaction_id: UUID,
        transaction_type: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            user_id=user_id,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Recorded {transaction_type} of {amount}",
            details={"type": transaction_type, "amount": amount},
        )

    @staticmethod
    def transaction_deleted(user_id: UUID, transaction_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            user_id=user_id,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
        )

    @staticmethod
    def delete_refused(user_id: UUID, transaction_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_REFUSED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Delete refused: transaction missing or not owned by caller",
        )

    @staticmethod
    def summary_computed(
        user_id: UUID,
        view: str,
        period: Optional[str],
        transaction_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_COMPUTED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            description=f"Computed {view} over {transaction_count} transactions",
            details={
                "view": view,
                "period": period,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def store_error(
        operation: str,
        error_message: str,
        user_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"Store error during {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
