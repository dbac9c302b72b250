"""DataFrame builders for the portal's tables."""

from collections.abc import Sequence

import pandas as pd

from banking_client.schemas import Account, Decorator, Transaction, User

ACCOUNT_COLUMNS = {
    "id": "ID",
    "account_number": "Account Number",
    "account_type": "Type",
    "status": "Status",
    "balance": "Balance ($)",
    "available_balance": "Available ($)",
    "interest_rate": "Interest Rate (%)",
    "user_id": "Owner",
}

TRANSACTION_COLUMNS = {
    "id": "ID",
    "transaction_id": "Reference",
    "transaction_type": "Type",
    "status": "Status",
    "amount": "Amount ($)",
    "from_account": "From",
    "to_account": "To",
    "created_at": "Created",
    "failure_reason": "Failure Reason",
}

USER_COLUMNS = {
    "id": "ID",
    "username": "Username",
    "display_name": "Name",
    "email": "Email",
    "roles": "Roles",
    "is_active": "Active",
}

DECORATOR_COLUMNS = {
    "id": "ID",
    "decorator_type": "Feature",
    "description": "Description",
    "monthly_fee": "Monthly Fee ($)",
    "is_active": "Active",
    "activated_at": "Activated",
}


def _frame(rows: list[dict], columns: dict[str, str]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=list(columns))
    return df.rename(columns=columns)


def accounts_frame(accounts: Sequence[Account]) -> pd.DataFrame:
    rows = [a.model_dump(mode="json") for a in accounts]
    return _frame(rows, ACCOUNT_COLUMNS)


def transactions_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    rows = [t.model_dump(mode="json") for t in transactions]
    df = _frame(rows, TRANSACTION_COLUMNS)
    if len(df) > 0:
        df["Created"] = pd.to_datetime(df["Created"], errors="coerce")
    return df


def users_frame(users: Sequence[User]) -> pd.DataFrame:
    rows = []
    for user in users:
        row = user.model_dump(mode="json")
        row["display_name"] = user.display_name
        row["roles"] = ", ".join(sorted(role.value for role in user.roles))
        rows.append(row)
    return _frame(rows, USER_COLUMNS)


def decorators_frame(decorators: Sequence[Decorator]) -> pd.DataFrame:
    rows = [d.model_dump(mode="json") for d in decorators]
    return _frame(rows, DECORATOR_COLUMNS)
