"""Resource clients: one method per backend operation.

Each class wraps one controller of the backend under ``/api``. Methods take
and return typed schemas; the backend stays authoritative for every value,
so nothing here computes balances, interest or approval outcomes.
"""

from typing import Any, TypeVar

from pydantic import BaseModel

from banking_client.schemas import (
    Account,
    AccountStatus,
    AccountType,
    AddDecoratorRequest,
    AmountRequest,
    ApprovalRequest,
    CreateAccountRequest,
    CreateGroupRequest,
    CreateTransactionRequest,
    Decorator,
    FacadeTransferRequest,
    Group,
    GroupStatistics,
    InterestReport,
    Notification,
    NotificationPreference,
    OpenAccountRequest,
    OperationResult,
    PaymentRequest,
    RegisterRequest,
    Transaction,
    TransferRequest,
    UpdateAccountRequest,
    User,
    UserSummary,
)
from banking_client.roles import Role
from banking_client.transport import ApiTransport

ModelT = TypeVar("ModelT", bound=BaseModel)


def _one(model: type[ModelT], data: Any) -> ModelT:
    return model.model_validate(data)


def _many(model: type[ModelT], data: Any) -> list[ModelT]:
    return [model.model_validate(item) for item in data or []]


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


class _Resource:
    def __init__(self, transport: ApiTransport):
        self._transport = transport


class AccountsClient(_Resource):
    """/accounts"""

    def list_all(self) -> list[Account]:
        return _many(Account, self._transport.get("/accounts"))

    def get(self, account_id: int) -> Account:
        return _one(Account, self._transport.get(f"/accounts/{account_id}"))

    def list_for_user(self, user_id: int) -> list[Account]:
        return _many(Account, self._transport.get(f"/accounts/user/{user_id}"))

    def create(self, request: CreateAccountRequest) -> Account:
        return _one(
            Account, self._transport.post("/accounts", json=request.to_payload())
        )

    def update(self, account_id: int, request: UpdateAccountRequest) -> Account:
        data = self._transport.put(f"/accounts/{account_id}", json=request.to_payload())
        return _one(Account, data)

    def set_status(self, account_id: int, status: AccountStatus) -> Account:
        data = self._transport.patch(
            f"/accounts/{account_id}/status", params={"status": status.value}
        )
        return _one(Account, data)

    def delete(self, account_id: int) -> None:
        self._transport.delete(f"/accounts/{account_id}")

    def balance(self, account_id: int) -> float:
        data = self._transport.get(f"/accounts/{account_id}/balance")
        if isinstance(data, dict):
            return float(data.get("balance", 0.0))
        return float(data)

    def transfer(self, request: TransferRequest) -> OperationResult | None:
        data = self._transport.post("/accounts/transfer", json=request.to_payload())
        return _one(OperationResult, data) if isinstance(data, dict) else None

    def total_balance(self, user_id: int) -> float:
        data = self._transport.get(f"/accounts/user/{user_id}/total-balance")
        if isinstance(data, dict):
            return float(data.get("totalBalance", 0.0))
        return float(data or 0.0)

    def exists(self, account_number: str) -> bool:
        data = self._transport.get(f"/accounts/exists/{account_number}")
        if isinstance(data, dict):
            return bool(data.get("exists"))
        return bool(data)


class TransactionsClient(_Resource):
    """/transactions"""

    def list_all(self) -> list[Transaction]:
        return _many(Transaction, self._transport.get("/transactions"))

    def get(self, transaction_id: int) -> Transaction:
        return _one(Transaction, self._transport.get(f"/transactions/{transaction_id}"))

    def create(self, request: CreateTransactionRequest) -> Transaction:
        data = self._transport.post("/transactions", json=request.to_payload())
        return _one(Transaction, data)

    def for_account(self, account_id: int) -> list[Transaction]:
        data = self._transport.get(f"/transactions/account/{account_id}")
        return _many(Transaction, data)

    def recent_for_account(self, account_id: int, limit: int = 10) -> list[Transaction]:
        data = self._transport.get(
            f"/transactions/account/{account_id}/recent", params={"limit": limit}
        )
        return _many(Transaction, data)

    def recent_for_user(self, user_id: int, limit: int = 50) -> list[Transaction]:
        data = self._transport.get(
            f"/transactions/user/{user_id}/recent", params={"limit": limit}
        )
        return _many(Transaction, data)

    def pending_approval(self) -> list[Transaction]:
        return _many(Transaction, self._transport.get("/transactions/pending-approval"))

    def approve(
        self, transaction_id: int, manager_id: int, comments: str | None = None
    ) -> Any:
        body = ApprovalRequest(manager_id=manager_id, comments=comments)
        return self._transport.post(
            f"/transactions/{transaction_id}/approve", json=body.to_payload()
        )

    def reject(
        self,
        transaction_id: int,
        manager_id: int,
        reason: str,
        comments: str | None = None,
    ) -> Any:
        body = ApprovalRequest(manager_id=manager_id, reason=reason, comments=comments)
        return self._transport.post(
            f"/transactions/{transaction_id}/reject", json=body.to_payload()
        )

    def cancel(self, transaction_id: int, user_id: int, reason: str) -> Transaction:
        data = self._transport.post(
            f"/transactions/{transaction_id}/cancel",
            params={"userId": user_id, "reason": reason},
        )
        return _one(Transaction, data)

    def account_statistics(self, account_id: int) -> dict[str, Any]:
        return self._transport.get(f"/transactions/account/{account_id}/statistics") or {}

    def process_pending(self) -> Any:
        return self._transport.post("/transactions/process-pending")


class InterestClient(_Resource):
    """/interest"""

    def apply(self, account_id: int) -> Any:
        return self._transport.post(f"/interest/accounts/{account_id}/apply")

    def apply_all(self) -> Any:
        return self._transport.post("/interest/apply-all")

    def change_strategy(self, account_id: int, strategy_name: str) -> None:
        self._transport.post(
            f"/interest/accounts/{account_id}/change-strategy",
            json={"strategyName": strategy_name},
        )

    def report(self, account_id: int) -> InterestReport:
        data = self._transport.get(f"/interest/accounts/{account_id}/report")
        return _one(InterestReport, data)

    def future_interest(self, account_id: int, months: int) -> float:
        data = self._transport.get(f"/interest/accounts/{account_id}/future/{months}")
        return float(data or 0.0)

    def strategies(self) -> dict[str, Any]:
        return self._transport.get("/interest/strategies") or {}

    def strategies_for_type(self, account_type: AccountType) -> dict[str, Any]:
        return self._transport.get(f"/interest/strategies/{account_type.value}") or {}

    def compare(self, account_id: int, strategy1: str, strategy2: str) -> dict[str, Any]:
        data = self._transport.get(
            f"/interest/accounts/{account_id}/compare",
            params={"strategy1": strategy1, "strategy2": strategy2},
        )
        return data or {}

    def effective_rate(self, account_id: int) -> float:
        return float(self._transport.get(f"/interest/accounts/{account_id}/rate") or 0.0)


class DecoratorsClient(_Resource):
    """/decorators (account feature add-ons)"""

    def add(self, request: AddDecoratorRequest) -> Decorator:
        data = self._transport.post("/decorators", json=request.to_payload())
        return _one(Decorator, data)

    def for_account(self, account_id: int) -> list[Decorator]:
        return _many(Decorator, self._transport.get(f"/decorators/account/{account_id}"))

    def active_for_account(self, account_id: int) -> list[Decorator]:
        data = self._transport.get(f"/decorators/account/{account_id}/active")
        return _many(Decorator, data)

    def features(self, account_id: int) -> Any:
        return self._transport.get(f"/decorators/account/{account_id}/features")

    def activate(self, decorator_id: int) -> Any:
        return self._transport.patch(f"/decorators/{decorator_id}/activate")

    def remove(self, decorator_id: int) -> None:
        self._transport.delete(f"/decorators/{decorator_id}")

    def apply_fees(self) -> Any:
        return self._transport.post("/decorators/apply-fees")

    def info(self) -> Any:
        return self._transport.get("/decorators/info")


class GroupsClient(_Resource):
    """/groups"""

    def list_all(self) -> list[Group]:
        return _many(Group, self._transport.get("/groups"))

    def create(self, request: CreateGroupRequest) -> Group:
        return _one(Group, self._transport.post("/groups", json=request.to_payload()))

    def get(self, group_id: int) -> Group:
        return _one(Group, self._transport.get(f"/groups/{group_id}"))

    def for_user(self, user_id: int) -> list[Group]:
        return _many(Group, self._transport.get(f"/groups/user/{user_id}"))

    def add_account(self, group_id: int, account_id: int) -> Any:
        return self._transport.post(f"/groups/{group_id}/accounts/{account_id}")

    def remove_account(self, group_id: int, account_id: int) -> Any:
        return self._transport.delete(f"/groups/{group_id}/accounts/{account_id}")

    def accounts(self, group_id: int) -> list[Account]:
        return _many(Account, self._transport.get(f"/groups/{group_id}/accounts"))

    def balance(self, group_id: int) -> float:
        return float(self._transport.get(f"/groups/{group_id}/balance") or 0.0)

    def transfer(
        self, group_id: int, from_account: str, to_account: str, amount: float
    ) -> None:
        self._transport.post(
            f"/groups/{group_id}/transfer",
            params={
                "fromAccount": from_account,
                "toAccount": to_account,
                "amount": amount,
            },
        )

    def set_status(self, group_id: int, status: AccountStatus) -> Group:
        data = self._transport.patch(
            f"/groups/{group_id}/status", params={"status": status.value}
        )
        return _one(Group, data)

    def statistics(self, group_id: int) -> GroupStatistics:
        data = self._transport.get(f"/groups/{group_id}/statistics")
        return _one(GroupStatistics, data)

    def delete(self, group_id: int) -> None:
        self._transport.delete(f"/groups/{group_id}")


class UsersClient(_Resource):
    """/users"""

    def list_all(self) -> list[User]:
        return _many(User, self._transport.get("/users"))

    def create(self, request: RegisterRequest, roles: set[Role] | None = None) -> User:
        payload = request.to_payload()
        if roles:
            payload["roles"] = sorted(role.wire_name for role in roles)
        return _one(User, self._transport.post("/users", json=payload))

    def get(self, user_id: int) -> User:
        return _one(User, self._transport.get(f"/users/{user_id}"))

    def by_username(self, username: str) -> User:
        return _one(User, self._transport.get(f"/users/username/{username}"))

    def search(self, name: str) -> list[User]:
        return _many(User, self._transport.get("/users/search", params={"name": name}))

    def set_status(self, user_id: int, is_active: bool) -> User:
        data = self._transport.patch(
            f"/users/{user_id}/status", params={"isActive": _bool_param(is_active)}
        )
        return _one(User, data)

    def add_role(self, user_id: int, role: Role) -> User:
        data = self._transport.patch(
            f"/users/{user_id}/role", params={"role": role.wire_name}
        )
        return _one(User, data)


class NotificationsClient(_Resource):
    """/notifications"""

    def for_user(self, user_id: int) -> list[Notification]:
        data = self._transport.get(f"/notifications/user/{user_id}")
        return _many(Notification, data)

    def unread(self, user_id: int) -> list[Notification]:
        data = self._transport.get(f"/notifications/user/{user_id}/unread")
        return _many(Notification, data)

    def mark_read(self, notification_id: int) -> None:
        self._transport.patch(f"/notifications/{notification_id}/read")

    def mark_all_read(self, user_id: int) -> None:
        self._transport.patch(f"/notifications/user/{user_id}/read-all")

    def delete(self, notification_id: int) -> None:
        self._transport.delete(f"/notifications/{notification_id}")

    def preferences(self, user_id: int) -> NotificationPreference:
        data = self._transport.get(f"/notifications/user/{user_id}/preferences")
        return _one(NotificationPreference, data)

    def update_preferences(
        self, user_id: int, preferences: NotificationPreference
    ) -> NotificationPreference:
        data = self._transport.patch(
            f"/notifications/user/{user_id}/preferences",
            json=preferences.to_payload(),
        )
        return _one(NotificationPreference, data)

    def stats(self, user_id: int) -> dict[str, Any]:
        return self._transport.get(f"/notifications/user/{user_id}/stats") or {}


class BankingFacadeClient(_Resource):
    """/banking: composite operations wrapping several lower-level calls."""

    def open_account(self, request: OpenAccountRequest) -> OperationResult:
        data = self._transport.post("/banking/accounts/open", json=request.to_payload())
        return _one(OperationResult, data)

    def transfer(self, request: FacadeTransferRequest) -> OperationResult:
        data = self._transport.post("/banking/transfer", json=request.to_payload())
        return _one(OperationResult, data)

    def withdraw(self, request: AmountRequest) -> OperationResult:
        data = self._transport.post("/banking/withdraw", json=request.to_payload())
        return _one(OperationResult, data)

    def deposit(self, request: AmountRequest) -> OperationResult:
        data = self._transport.post("/banking/deposit", json=request.to_payload())
        return _one(OperationResult, data)

    def account_summary(self, account_number: str) -> dict[str, Any]:
        return self._transport.get(f"/banking/accounts/{account_number}/summary") or {}

    def user_summary(self, user_id: int) -> UserSummary:
        data = self._transport.get(f"/banking/users/{user_id}/summary")
        return _one(UserSummary, data)

    def account_transactions(self, account_number: str) -> list[Transaction]:
        data = self._transport.get(f"/banking/accounts/{account_number}/transactions")
        return _many(Transaction, data)


class PaymentsClient(_Resource):
    """/payments"""

    def process(self, request: PaymentRequest) -> OperationResult:
        data = self._transport.post("/payments/process", json=request.to_payload())
        return _one(OperationResult, data)
