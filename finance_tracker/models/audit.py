"""
Audit Models for Finance Tracker

Every mutation of the entity store is logged as an audit event.
This provides:
1. Traceability of every balance and total change
2. Debugging information when things go wrong
3. A record of rejected operations and external failures

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every mutation operation has its own event type.
    """
    # Accounts
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_DELETED = "account_deleted"
    ACCOUNT_BALANCE_CHANGED = "account_balance_changed"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"

    # Subscriptions
    SUBSCRIPTION_ADDED = "subscription_added"
    SUBSCRIPTION_DELETED = "subscription_deleted"

    # Goals
    GOAL_ADDED = "goal_added"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"
    GOAL_CONTRIBUTION = "goal_contribution"

    # Debts
    DEBT_ADDED = "debt_added"
    DEBT_UPDATED = "debt_updated"
    DEBT_DELETED = "debt_deleted"
    DEBT_PAYMENT = "debt_payment"

    # Settings & lifecycle
    SETTINGS_UPDATED = "settings_updated"
    STATE_LOADED = "state_loaded"
    DATA_CLEARED = "data_cleared"
    DATA_EXPORTED = "data_exported"

    # Rejections
    OPERATION_REJECTED = "operation_rejected"

    # AI
    COMMAND_PARSED = "command_parsed"
    COMMAND_FAILED = "command_failed"

    # System events
    PERSISTENCE_FAILED = "persistence_failed"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


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
    Every state change creates one of these.
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

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'debt', 'command')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Event details
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

    is_user_action: bool = Field(
        default=True,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_added("debt", debt.id, debt.name)
        event = AuditEventBuilder.debt_payment(debt.id, debt.name, amount, remaining)
    """

    _ADDED = {
        "account": AuditEventType.ACCOUNT_ADDED,
        "transaction": AuditEventType.TRANSACTION_ADDED,
        "subscription": AuditEventType.SUBSCRIPTION_ADDED,
        "goal": AuditEventType.GOAL_ADDED,
        "debt": AuditEventType.DEBT_ADDED,
    }
    _UPDATED = {
        "goal": AuditEventType.GOAL_UPDATED,
        "debt": AuditEventType.DEBT_UPDATED,
    }
    _DELETED = {
        "account": AuditEventType.ACCOUNT_DELETED,
        "transaction": AuditEventType.TRANSACTION_DELETED,
        "subscription": AuditEventType.SUBSCRIPTION_DELETED,
        "goal": AuditEventType.GOAL_DELETED,
        "debt": AuditEventType.DEBT_DELETED,
    }

    @staticmethod
    def entity_added(entity_type: str, entity_id: UUID, label: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._ADDED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.title()} added: {label}"[:500],
        )

    @staticmethod
    def entity_updated(entity_type: str, entity_id: UUID, label: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._UPDATED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.title()} updated: {label}"[:500],
        )

    @staticmethod
    def entity_deleted(entity_type: str, entity_id: UUID, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._DELETED[entity_type],
            severity=AuditSeverity.INFO if found else AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=(
                f"{entity_type.title()} deleted"
                if found else f"{entity_type.title()} to delete was not found"
            ),
        )

    @staticmethod
    def account_balance_changed(
        account_id: UUID,
        transaction_id: UUID,
        old_balance: str,
        new_balance: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_BALANCE_CHANGED,
            entity_type="account",
            entity_id=account_id,
            description=f"Balance changed from {old_balance} to {new_balance}",
            details={
                "transaction_id": str(transaction_id),
                "old_balance": old_balance,
                "new_balance": new_balance,
            },
            is_user_action=False,
        )

    @staticmethod
    def goal_contribution(
        goal_id: UUID,
        goal_name: str,
        amount: str,
        current_amount: str,
        transaction_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CONTRIBUTION,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Contributed {amount} to {goal_name}"[:500],
            details={
                "amount": amount,
                "current_amount": current_amount,
                "transaction_id": str(transaction_id),
            },
        )

    @staticmethod
    def debt_payment(
        debt_id: UUID,
        debt_name: str,
        amount: str,
        remaining_amount: str,
        transaction_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_PAYMENT,
            entity_type="debt",
            entity_id=debt_id,
            description=f"Paid {amount} towards {debt_name}"[:500],
            details={
                "amount": amount,
                "remaining_amount": remaining_amount,
                "transaction_id": str(transaction_id),
            },
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        reason: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{operation} rejected: {reason}"[:500],
            details={"operation": operation},
            error_message=reason,
        )

    @staticmethod
    def settings_updated(changed_fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            description="Settings updated",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def state_loaded(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            severity=AuditSeverity.DEBUG,
            description="State loaded from storage",
            details=counts,
            is_user_action=False,
        )

    @staticmethod
    def data_cleared() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_CLEARED,
            severity=AuditSeverity.WARNING,
            description="All data cleared and settings reset",
        )

    @staticmethod
    def data_exported(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            description="Data exported",
            details=counts,
        )

    @staticmethod
    def command_parsed(intent: str, source: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_PARSED,
            entity_type="command",
            description=f"Command parsed as {intent}",
            details={"intent": intent, "source": source},
        )

    @staticmethod
    def command_failed(error_message: str, source: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="command",
            description="Command could not be applied",
            details={"source": source},
            error_message=error_message,
        )

    @staticmethod
    def persistence_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Failed to persist {key}"[:500],
            details={"key": key},
            error_message=error_message,
            is_user_action=False,
        )

    @staticmethod
    def external_service_error(service: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            details={"service": service},
            error_message=error_message,
            is_user_action=False,
        )
