"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. A record of rejected logins and tokens

The audit logger:
- Writes structured JSON lines through structlog
- Never receives secrets (see ledger.models.audit)
"""

import logging
import sys
from typing import Optional
from uuid import UUID

import structlog

from ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog for JSON output.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log.
    """

    def __init__(self, logger_name: str = "ledger.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at a level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_user_registered(self, user_id: UUID, username: str) -> None:
        self.log(AuditEventBuilder.user_registered(user_id=user_id, username=username))

    def log_registration_rejected(self, username: str, reason: str) -> None:
        self.log(AuditEventBuilder.registration_rejected(username=username, reason=reason))

    def log_login_succeeded(self, user_id: UUID) -> None:
        self.log(AuditEventBuilder.login_succeeded(user_id=user_id))

    def log_login_failed(self, email: str) -> None:
        self.log(AuditEventBuilder.login_failed(email=email))

    def log_token_rejected(self, kind: str) -> None:
        self.log(AuditEventBuilder.token_rejected(kind=kind))

    def log_transaction_created(
        self,
        user_id: UUID,
        transaction_id: UUID,
        transaction_type: str,
        amount: str,
    ) -> None:
        """Log a newly recorded transaction."""
        event = AuditEventBuilder.transaction_created(
            user_id=user_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
        )
        self.log(event)

    def log_transaction_deleted(self, user_id: UUID, transaction_id: UUID) -> None:
        self.log(AuditEventBuilder.transaction_deleted(
            user_id=user_id,
            transaction_id=transaction_id,
        ))

    def log_delete_refused(self, user_id: UUID, transaction_id: UUID) -> None:
        self.log(AuditEventBuilder.delete_refused(
            user_id=user_id,
            transaction_id=transaction_id,
        ))

    def log_summary_computed(
        self,
        user_id: UUID,
        view: str,
        period: Optional[str],
        transaction_count: int,
    ) -> None:
        """Log an aggregate computation."""
        event = AuditEventBuilder.summary_computed(
            user_id=user_id,
            view=view,
            period=period,
            transaction_count=transaction_count,
        )
        self.log(event)

    def log_store_error(
        self,
        operation: str,
        error_message: str,
        user_id: Optional[UUID] = None,
    ) -> None:
        """Log a backend failure with full detail. The caller only sees a 500."""
        event = AuditEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            user_id=user_id,
        )
        self.log(event)
