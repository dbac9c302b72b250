"""Pydantic schemas for backend request/response payloads.

The backend speaks camelCase JSON; models expose snake_case attributes and
serialize back with aliases. Unknown fields are ignored so that newer
backend builds do not break the portal.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from banking_client.roles import Role, parse_roles


class WireModel(BaseModel):
    """Base model for camelCase payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict with wire names, dropping unset values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class AccountType(str, Enum):
    SAVINGS = "SAVINGS"
    CHECKING = "CHECKING"
    LOAN = "LOAN"
    INVESTMENT = "INVESTMENT"
    BUSINESS = "BUSINESS"


class AccountStatus(str, Enum):
    ACTIVE = "ACTIVE"
    FROZEN = "FROZEN"
    SUSPENDED = "SUSPENDED"
    CLOSED = "CLOSED"
    PENDING = "PENDING"

    @property
    def is_terminal(self) -> bool:
        return self is AccountStatus.CLOSED


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"
    PAYMENT = "PAYMENT"
    INTEREST = "INTEREST"
    FEE = "FEE"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_pending(self) -> bool:
        return self in (TransactionStatus.PENDING, TransactionStatus.PENDING_APPROVAL)

    @property
    def is_final(self) -> bool:
        return not self.is_pending


class DecoratorType(str, Enum):
    """Account feature add-ons offered by the backend."""

    OVERDRAFT_PROTECTION = "OVERDRAFT_PROTECTION"
    INSURANCE = "INSURANCE"
    PREMIUM_SERVICES = "PREMIUM_SERVICES"


class GroupType(str, Enum):
    FAMILY = "FAMILY"
    BUSINESS = "BUSINESS"
    JOINT = "JOINT"


# --- Response models ---


class User(WireModel):
    """User profile as returned by /auth/me, /auth/login and /users."""

    id: int = Field(validation_alias=AliasChoices("userId", "id", "user_id"))
    username: str
    email: str | None = None
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    roles: frozenset[Role] = Field(default_factory=frozenset)
    is_active: bool = Field(
        default=True, validation_alias=AliasChoices("isActive", "active", "is_active")
    )
    last_login: datetime | None = None

    @field_validator("roles", mode="before")
    @classmethod
    def _parse_roles(cls, value: Any) -> frozenset[Role]:
        return parse_roles(value)

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        names = " ".join(n for n in (self.first_name, self.last_name) if n)
        return names or self.username


class AuthResponse(WireModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int | None = None
    user_id: int
    username: str
    email: str | None = None
    full_name: str | None = None
    roles: frozenset[Role] = Field(default_factory=frozenset)
    last_login: datetime | None = None

    @field_validator("roles", mode="before")
    @classmethod
    def _parse_roles(cls, value: Any) -> frozenset[Role]:
        return parse_roles(value)

    def to_user(self) -> User:
        return User(
            id=self.user_id,
            username=self.username,
            email=self.email,
            full_name=self.full_name,
            roles=self.roles,
            last_login=self.last_login,
        )


class Account(WireModel):
    id: int
    account_number: str
    account_type: AccountType
    status: AccountStatus = AccountStatus.ACTIVE
    balance: float = 0.0
    available_balance: float | None = None
    interest_rate: float | None = None
    overdraft_limit: float | None = None
    minimum_balance: float | None = None
    interest_strategy_name: str | None = None
    user_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def label(self) -> str:
        """Selector label, e.g. ``SAVINGS - ACC123 ($1,000.00)``."""
        return f"{self.account_type.value} - {self.account_number} (${self.balance:,.2f})"


class Transaction(WireModel):
    id: int
    transaction_id: str | None = None
    transaction_type: TransactionType
    status: TransactionStatus
    amount: float
    from_account: str | None = None
    to_account: str | None = None
    description: str | None = None
    reference_number: str | None = None
    initiated_by: int | None = None
    approved_by: int | None = None
    created_at: datetime | None = None
    processed_at: datetime | None = None
    failure_reason: str | None = None

    @field_validator("from_account", "to_account", mode="before")
    @classmethod
    def _account_number(cls, value: Any) -> Any:
        # Entity endpoints embed the whole account instead of its number
        if isinstance(value, dict):
            return value.get("accountNumber")
        return value


class Group(WireModel):
    id: int = Field(validation_alias=AliasChoices("id", "groupId", "group_id"))
    group_name: str
    group_type: str | None = None
    description: str | None = None
    owner_id: int | None = None
    accounts: list[Account] = Field(default_factory=list)
    total_balance: float | None = None
    max_accounts: int | None = None
    created_at: datetime | None = None

    @field_validator("owner_id", mode="before")
    @classmethod
    def _owner(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("id") or value.get("userId")
        return value


class GroupStatistics(WireModel):
    group_id: int | None = None
    group_name: str | None = None
    total_accounts: int = 0
    active_accounts: int = 0
    frozen_accounts: int = 0
    total_balance: float = 0.0
    average_balance: float = 0.0
    largest_account_number: str | None = None
    largest_account_balance: float | None = None
    smallest_account_number: str | None = None
    smallest_account_balance: float | None = None


class Decorator(WireModel):
    id: int
    decorator_name: str | None = None
    decorator_type: DecoratorType
    description: str | None = None
    monthly_fee: float | None = None
    is_active: bool = True
    activated_at: datetime | None = None
    deactivated_at: datetime | None = None
    account_number: str | None = None
    account_type: str | None = None


class InterestReport(WireModel):
    """Interest summary computed by the backend; rendered as given."""

    account_number: str | None = None
    account_type: AccountType | None = None
    current_balance: float | None = None
    current_strategy: str | None = None
    effective_annual_rate: float | None = None
    monthly_interest: float | None = None
    yearly_interest: float | None = None
    projected5_year_interest: float | None = None
    last_interest_calculation: datetime | None = None
    next_interest_date: datetime | None = None


class Notification(WireModel):
    id: int
    title: str
    message: str
    type: str | None = None
    channel: str | None = None
    is_read: bool = Field(
        default=False, validation_alias=AliasChoices("isRead", "read", "is_read")
    )
    created_at: datetime | None = None
    read_at: datetime | None = None
    transaction_id: int | None = None


class NotificationPreference(WireModel):
    user_id: int | None = None
    email_enabled: bool | None = None
    sms_enabled: bool | None = None
    in_app_enabled: bool | None = None
    low_balance_alert: bool | None = None
    transfer_alert: bool | None = None
    login_alert: bool | None = None
    marketing_emails: bool | None = None
    monthly_statement: bool | None = None


class UserSummary(WireModel):
    user_id: int | None = None
    user_name: str | None = None
    user_email: str | None = None
    total_accounts: int = 0
    total_balance: float = 0.0
    last_login: datetime | None = None
    member_since: datetime | None = None


class OperationResult(WireModel):
    """Generic facade/payment response (success flag plus message)."""

    success: bool | None = None
    status: str | None = None
    message: str | None = None
    transaction_id: str | None = None
    account_number: str | None = None
    balance: float | None = None
    new_from_balance: float | None = None
    new_to_balance: float | None = None
    processing_time_ms: int | None = None


# --- Request models ---


class LoginRequest(WireModel):
    username: str
    password: str


class RegisterRequest(WireModel):
    username: str = Field(min_length=3, max_length=50)
    email: str
    password: str = Field(min_length=6, max_length=100)
    first_name: str
    last_name: str
    phone_number: str | None = None
    address: str | None = None
    national_id: str | None = Field(default=None, pattern=r"^[0-9]{10,20}$")


class TransferRequest(WireModel):
    from_account_number: str
    to_account_number: str
    amount: float
    description: str | None = None


class FacadeTransferRequest(WireModel):
    from_account_id: int | None = None
    to_account_id: int | None = None
    from_account_number: str | None = None
    to_account_number: str | None = None
    amount: float
    description: str | None = None


class AmountRequest(WireModel):
    """Body of the facade deposit and withdraw calls."""

    account_id: int | None = None
    account_number: str | None = None
    amount: float
    description: str | None = None


class CreateTransactionRequest(WireModel):
    transaction_type: TransactionType
    from_account_number: str | None = None
    to_account_number: str | None = None
    amount: float
    description: str | None = None
    reference_number: str | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None
    recurrence_count: int | None = None


class CreateAccountRequest(WireModel):
    account_type: AccountType
    user_id: int
    initial_balance: float = Field(default=0.0, ge=0)
    interest_rate: float | None = None
    overdraft_limit: float | None = None
    minimum_balance: float | None = None
    monthly_withdrawal_limit: int | None = None
    risk_level: str | None = None
    investment_type: str | None = None
    loan_amount: float | None = None
    loan_term_months: int | None = None
    annual_interest_rate: float | None = None


class UpdateAccountRequest(WireModel):
    status: AccountStatus | None = None
    balance: float | None = Field(default=None, ge=0)
    interest_rate: float | None = None
    overdraft_limit: float | None = None
    minimum_balance: float | None = None


class AddDecoratorRequest(WireModel):
    decorator_type: DecoratorType
    account_id: int | None = None
    overdraft_limit: float | None = None
    coverage_amount: float | None = None
    insurance_type: str | None = None
    tier_level: str | None = None
    description: str | None = None


class OpenAccountRequest(WireModel):
    user_id: int
    account_type: AccountType
    initial_balance: float = Field(default=0.0, ge=0)
    interest_rate: float | None = None
    overdraft_limit: float | None = None
    decorators: list[AddDecoratorRequest] | None = None


class CreateGroupRequest(WireModel):
    group_name: str = Field(min_length=1)
    description: str | None = None
    group_type: GroupType
    owner_id: int
    max_accounts: int | None = None


class ApprovalRequest(WireModel):
    manager_id: int
    reason: str | None = None
    comments: str | None = None


class PaymentRequest(WireModel):
    account_number: str
    recipient: str
    amount: float
    currency: str = "USD"
    description: str | None = None
    provider: str | None = None
