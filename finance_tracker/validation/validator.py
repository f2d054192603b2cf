"""
AI Command Validation

DESIGN DECISION: The model's JSON is treated as untrusted input.
It is decoded as a tagged variant (TRANSACTION | SUBSCRIPTION | UNKNOWN)
and every enum field is checked against the fixed sets. Values that do
not match EXACTLY are reported, never guessed at, and the command
becomes UNKNOWN with an explanation.

Two severities:
- error: the command is rejected
- warning: a default was filled in (e.g. missing date means today)

IMPORTANT: Validation NEVER silently fixes issues.
Every default it applies is reported as a warning.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import ValidationError

from finance_tracker.models.commands import (
    CommandIntent,
    ParsedCommand,
    ValidationIssue,
)
from finance_tracker.models.finance import (
    Category,
    Frequency,
    SubscriptionDraft,
    TransactionDraft,
    TransactionType,
)


class CommandValidator:
    """Turns raw model output into a ParsedCommand."""

    def __init__(self, today: Optional[date] = None):
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    # -------------------------------------------------------------------------
    # Field checks
    # -------------------------------------------------------------------------

    def _enum_field(
        self,
        data: dict[str, Any],
        field: str,
        enum_cls,
        issues: list[ValidationIssue],
        default=None,
    ):
        raw = data.get(field)
        if raw is None or raw == "":
            if default is None:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{field} is required",
                    severity="error",
                ))
                return None
            issues.append(ValidationIssue(
                field=field,
                issue_type="defaulted",
                message=f"{field} was missing; using {default.value}",
                severity="warning",
            ))
            return default
        try:
            return enum_cls(raw)
        except ValueError:
            allowed = ", ".join(member.value for member in enum_cls)
            issues.append(ValidationIssue(
                field=field,
                issue_type="unrecognized",
                message=f"Unrecognized {field} '{raw}'. Allowed: {allowed}",
                severity="error",
            ))
            return None

    def _amount_field(
        self,
        data: dict[str, Any],
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        raw = data.get("amount")
        if raw is None or isinstance(raw, bool):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="amount is required",
                severity="error",
            ))
            return None
        try:
            amount = Decimal(str(raw))
        except InvalidOperation:
            amount = None
        if amount is None or not amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"amount '{raw}' is not a number",
                severity="error",
            ))
            return None
        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="amount must be greater than zero",
                severity="error",
            ))
            return None
        return amount

    def _date_field(
        self,
        data: dict[str, Any],
        field: str,
        issues: list[ValidationIssue],
        required: bool,
    ) -> Optional[date]:
        raw = data.get(field)
        if not raw:
            if required:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{field} is required",
                    severity="error",
                ))
                return None
            issues.append(ValidationIssue(
                field=field,
                issue_type="defaulted",
                message=f"{field} was missing; using today",
                severity="warning",
            ))
            return self.today
        try:
            return date.fromisoformat(str(raw))
        except ValueError:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{field} '{raw}' is not a YYYY-MM-DD date",
                severity="error",
            ))
            return None

    # -------------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------------

    def _transaction(self, data: dict[str, Any], issues: list[ValidationIssue]):
        txn_type = self._enum_field(
            data, "type", TransactionType, issues, default=TransactionType.EXPENSE
        )
        amount = self._amount_field(data, issues)
        category = self._enum_field(data, "category", Category, issues, default=Category.OTHER)
        day = self._date_field(data, "date", issues, required=False)

        if any(issue.severity == "error" for issue in issues):
            return None
        return TransactionDraft(
            type=txn_type,
            amount=amount,
            category=category,
            transaction_date=day,
            description=str(data.get("description") or ""),
        )

    def _subscription(self, data: dict[str, Any], issues: list[ValidationIssue]):
        name = str(data.get("name") or "").strip()
        if not name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="name is required",
                severity="error",
            ))
        amount = self._amount_field(data, issues)
        frequency = self._enum_field(data, "frequency", Frequency, issues)
        category = self._enum_field(data, "category", Category, issues, default=Category.OTHER)
        next_payment = self._date_field(data, "nextPaymentDate", issues, required=True)

        if any(issue.severity == "error" for issue in issues):
            return None
        return SubscriptionDraft(
            name=name,
            amount=amount,
            frequency=frequency,
            category=category,
            next_payment_date=next_payment,
        )

    def validate(self, raw: Any) -> tuple[ParsedCommand, list[ValidationIssue]]:
        """
        Decode raw model output.

        Returns:
            (command, issues) where command.intent is UNKNOWN whenever
            any error-level issue was found
        """
        issues: list[ValidationIssue] = []

        if not isinstance(raw, dict):
            return ParsedCommand.unknown("The response was not a JSON object"), issues

        try:
            intent = CommandIntent(str(raw.get("intent", "")).upper())
        except ValueError:
            issues.append(ValidationIssue(
                field="intent",
                issue_type="unrecognized",
                message=f"Unrecognized intent '{raw.get('intent')}'",
                severity="error",
            ))
            return ParsedCommand.unknown(issues[-1].message), issues

        if intent == CommandIntent.UNKNOWN:
            message = raw.get("error") or "I could not understand the request."
            return ParsedCommand.unknown(str(message)), issues

        data = raw.get("data")
        if not isinstance(data, dict):
            issues.append(ValidationIssue(
                field="data",
                issue_type="missing",
                message="The response has no data object",
                severity="error",
            ))
            return ParsedCommand.unknown(issues[-1].message), issues

        try:
            if intent == CommandIntent.TRANSACTION:
                draft = self._transaction(data, issues)
                if draft is not None:
                    return ParsedCommand(intent=intent, transaction_data=draft), issues
            else:
                draft = self._subscription(data, issues)
                if draft is not None:
                    return ParsedCommand(intent=intent, subscription_data=draft), issues
        except ValidationError as e:
            issues.append(ValidationIssue(
                field="data",
                issue_type="invalid_value",
                message=f"The data did not pass validation: {e.error_count()} error(s)",
                severity="error",
            ))

        return ParsedCommand.unknown(self.summarize(issues)), issues

    @staticmethod
    def summarize(issues: list[ValidationIssue]) -> str:
        """One line listing the blocking problems."""
        errors = [issue.message for issue in issues if issue.severity == "error"]
        if not errors:
            return "I could not understand the request."
        return "Could not record this: " + "; ".join(errors)
