"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker system.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.finance import (
    Account,
    AccountDraft,
    AccountKind,
    Category,
    Debt,
    DebtDraft,
    DebtPayment,
    ExportBundle,
    FinanceSnapshot,
    Frequency,
    GoalContribution,
    GoalDraft,
    SavingsGoal,
    Subscription,
    SubscriptionDraft,
    Theme,
    Transaction,
    TransactionDraft,
    TransactionType,
    UserSettings,
)
from finance_tracker.models.dashboard import (
    CategoryTotal,
    DashboardSummary,
    Reminder,
    ReminderKind,
)
from finance_tracker.models.commands import (
    CommandIntent,
    CommandOutcome,
    ParsedCommand,
    ValidationIssue,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "Account",
    "AccountDraft",
    "AccountKind",
    "Category",
    "Debt",
    "DebtDraft",
    "DebtPayment",
    "ExportBundle",
    "FinanceSnapshot",
    "Frequency",
    "GoalContribution",
    "GoalDraft",
    "SavingsGoal",
    "Subscription",
    "SubscriptionDraft",
    "Theme",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "UserSettings",
    # Dashboard models
    "CategoryTotal",
    "DashboardSummary",
    "Reminder",
    "ReminderKind",
    # Command models
    "CommandIntent",
    "CommandOutcome",
    "ParsedCommand",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
