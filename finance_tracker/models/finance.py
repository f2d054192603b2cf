"""
Core Data Models for Finance Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and export
4. Keep drafts (user/AI input) separate from stored entities

DESIGN DECISION: Every stored entity has a matching Draft model without an id.
Mutation operations accept drafts, so the id is always assigned by the system
and never taken from input.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class Frequency(str, Enum):
    """How often a subscription is charged."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Category(str, Enum):
    """
    Supported transaction and subscription categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    consistent rollups and lets AI output be checked against a fixed set.
    """
    # Income
    SALARY = "salary"
    FREELANCE = "freelance"
    INVESTMENT = "investment"

    # Expenses
    HOUSING = "housing"
    TRANSPORT = "transport"
    FOOD = "food"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    SOFTWARE = "software"
    FITNESS = "fitness"
    SHOPPING = "shopping"
    DEBT = "debt"
    OTHER = "other"


class AccountKind(str, Enum):
    """Kind of place money is kept."""
    CASH = "cash"
    BANK = "bank"
    SAVINGS = "savings"
    WALLET = "wallet"
    OTHER = "other"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


# =============================================================================
# ACCOUNTS
# =============================================================================

class AccountDraft(BaseModel):
    """Input for creating an account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Account name"
    )
    kind: AccountKind = Field(
        default=AccountKind.BANK,
        description="Kind of account"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Opening balance (may be negative)"
    )
    color: str = Field(
        default="blue",
        max_length=30,
        description="Display color"
    )

    def to_entity(self) -> "Account":
        return Account(**self.model_dump(include=set(AccountDraft.model_fields)))


class Account(AccountDraft):
    """
    A cash or bank account.

    The balance changes only when a transaction linked to the account is
    created. Deleting that transaction later does not undo the change.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique account ID"
    )


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionDraft(BaseModel):
    """Input for creating a transaction."""
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType = Field(
        default=TransactionType.EXPENSE,
        description="Income or expense"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount; the sign comes from the type"
    )
    category: Category = Field(
        default=Category.OTHER,
        description="Transaction category"
    )
    transaction_date: date = Field(
        default_factory=date.today,
        description="When the transaction happened"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="Free text description"
    )
    account_id: Optional[UUID] = Field(
        default=None,
        description="Account whose balance this transaction moves"
    )

    def to_entity(self) -> "Transaction":
        return Transaction(**self.model_dump(include=set(TransactionDraft.model_fields)))


class Transaction(TransactionDraft):
    """
    A single income or expense record.

    Transactions are never edited in place, only created and deleted.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it affects a balance."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================

class SubscriptionDraft(BaseModel):
    """Input for creating a recurring subscription."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Subscription name"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount charged per period"
    )
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO currency code"
    )
    frequency: Frequency = Field(
        default=Frequency.MONTHLY,
        description="Charging period"
    )
    category: Category = Field(
        default=Category.OTHER,
        description="Subscription category"
    )
    next_payment_date: date = Field(
        ...,
        description="Date of the next charge"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500
    )

    def to_entity(self) -> "Subscription":
        return Subscription(**self.model_dump(include=set(SubscriptionDraft.model_fields)))


class Subscription(SubscriptionDraft):
    """A recurring charge."""

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique subscription ID"
    )


# =============================================================================
# SAVINGS GOALS
# =============================================================================

class GoalDraft(BaseModel):
    """Input for creating a savings goal."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Goal name"
    )
    target_amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount to reach"
    )
    current_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount saved so far (may exceed the target)"
    )
    deadline: Optional[date] = None
    color: str = Field(
        default="blue",
        max_length=30
    )

    def to_entity(self) -> "SavingsGoal":
        return SavingsGoal(**self.model_dump(include=set(GoalDraft.model_fields)))


class SavingsGoal(GoalDraft):
    """A savings target that grows through contributions."""

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique goal ID"
    )


# =============================================================================
# DEBTS
# =============================================================================

class DebtDraft(BaseModel):
    """
    Input for creating a debt.

    If remaining_amount is omitted the debt is new and nothing is paid yet.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Debt name"
    )
    total_amount: Decimal = Field(
        ...,
        gt=0,
        description="Original amount owed"
    )
    remaining_amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Amount still owed"
    )
    due_date: Optional[date] = None
    interest_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Annual interest rate in percent"
    )
    color: str = Field(
        default="red",
        max_length=30
    )

    @model_validator(mode='after')
    def validate_remaining(self):
        """Remaining amount can never exceed the total."""
        if self.remaining_amount is not None and self.remaining_amount > self.total_amount:
            raise ValueError("Remaining amount cannot exceed total amount")
        return self

    def to_entity(self) -> "Debt":
        data = self.model_dump(include=set(DebtDraft.model_fields))
        if data["remaining_amount"] is None:
            data["remaining_amount"] = data["total_amount"]
        return Debt(**data)


class Debt(DebtDraft):
    """A debt that shrinks through payments."""

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique debt ID"
    )
    remaining_amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount still owed"
    )


# =============================================================================
# USER SETTINGS
# =============================================================================

class UserSettings(BaseModel):
    """
    User preferences. Exactly one instance exists at any time.

    Not to be confused with finance_tracker.config.Settings, which holds
    deployment configuration read from the environment.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    monthly_budget: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Monthly spending ceiling; 0 means no budget"
    )
    user_name: str = Field(
        default="User",
        max_length=100
    )
    currency_symbol: str = Field(
        default="$",
        max_length=5
    )
    currency_code: str = Field(
        default="USD",
        min_length=3,
        max_length=3
    )
    theme: Theme = Theme.LIGHT


# =============================================================================
# COMPOSITE RESULTS
# =============================================================================

class GoalContribution(BaseModel):
    """A goal update and the transaction recording it, applied together."""

    goal: SavingsGoal
    transaction: Transaction


class DebtPayment(BaseModel):
    """A debt update and the transaction recording it, applied together."""

    debt: Debt
    transaction: Transaction


# =============================================================================
# SNAPSHOT & EXPORT
# =============================================================================

class FinanceSnapshot(BaseModel):
    """Read-only view of every collection at one moment."""
    model_config = ConfigDict(frozen=True)

    accounts: tuple[Account, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    subscriptions: tuple[Subscription, ...] = ()
    goals: tuple[SavingsGoal, ...] = ()
    debts: tuple[Debt, ...] = ()
    settings: UserSettings = Field(default_factory=UserSettings)


class ExportBundle(BaseModel):
    """Backup document produced by the export operation."""

    settings: UserSettings
    subscriptions: list[Subscription] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    goals: list[SavingsGoal] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    export_date: datetime
