"""Shared pytest fixtures for client and portal tests."""

from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import MagicMock

import jwt
import pytest
import requests

from banking_client.config import PortalConfig
from banking_client.schemas import Account, Transaction, User
from banking_client.session import MemorySessionStore, Session

API = "http://bank.test/api"
AUTH = "http://bank.test/auth"


def _make_token(expires_in: timedelta | None = timedelta(hours=1)) -> str:
    claims: dict[str, Any] = {"sub": "alice"}
    if expires_in is not None:
        claims["exp"] = int((datetime.now(UTC) + expires_in).timestamp())
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def _make_response(
    status_code: int = 200,
    body: Any = None,
    text: str | None = None,
) -> MagicMock:
    """Build a mock ``requests.Response``."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.reason = "Error" if status_code >= 400 else "OK"
    if body is not None:
        response.json.return_value = body
        response.content = b"json"
        response.text = str(body)
    else:
        response.json.side_effect = ValueError("No JSON")
        response.text = text or ""
        response.content = (text or "").encode()
    return response


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def make_token():
    return _make_token


@pytest.fixture
def config(tmp_path) -> PortalConfig:
    return PortalConfig(
        api_base_url=API,
        auth_base_url=AUTH,
        timeout_seconds=5.0,
        notification_poll_seconds=30.0,
        session_path=tmp_path / "session.json",
    )


@pytest.fixture
def user() -> User:
    return User(
        id=7,
        username="alice",
        email="alice@example.com",
        first_name="Alice",
        last_name="Smith",
        roles=["ROLE_CUSTOMER"],
    )


@pytest.fixture
def manager() -> User:
    return User(id=42, username="mgr", roles=["ROLE_MANAGER"])


@pytest.fixture
def session(user) -> Session:
    return Session(token=_make_token(), user=user)


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def logged_in_store(session) -> MemorySessionStore:
    return MemorySessionStore(session)


@pytest.fixture
def http() -> MagicMock:
    """Mock ``requests.Session`` used by the transport."""
    mock = MagicMock(spec=requests.Session)
    mock.headers = {}
    mock.request.return_value = _make_response(200, {})
    return mock


@pytest.fixture
def sample_accounts() -> list[Account]:
    return [
        Account(
            id=1,
            account_number="ACC001",
            account_type="CHECKING",
            status="ACTIVE",
            balance=1000.0,
            user_id=7,
        ),
        Account(
            id=2,
            account_number="ACC002",
            account_type="SAVINGS",
            status="ACTIVE",
            balance=250.5,
            user_id=7,
        ),
    ]


@pytest.fixture
def pending_transactions() -> list[Transaction]:
    return [
        Transaction(
            id=101,
            transaction_type="TRANSFER",
            status="PENDING_APPROVAL",
            amount=15000.0,
            from_account="ACC001",
            to_account="ACC999",
        ),
        Transaction(
            id=102,
            transaction_type="WITHDRAWAL",
            status="PENDING_APPROVAL",
            amount=12000.0,
            from_account="ACC002",
        ),
    ]


@pytest.fixture
def client(sample_accounts) -> MagicMock:
    """Mock ``BankingClient`` with the sub-clients the orchestrators use."""
    mock = MagicMock()
    mock.accounts.list_for_user.return_value = sample_accounts
    mock.groups.accounts.return_value = sample_accounts
    return mock
