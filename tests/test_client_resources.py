"""Tests for the resource clients: paths, methods and wire payloads."""

import pytest

from banking_client import BankingClient
from banking_client.exceptions import AuthenticationError
from banking_client.roles import Role
from banking_client.schemas import (
    AccountStatus,
    AccountType,
    AmountRequest,
    CreateAccountRequest,
    CreateGroupRequest,
    FacadeTransferRequest,
    GroupType,
    RegisterRequest,
    TransferRequest,
)
from banking_client.session import FileSessionStore


@pytest.fixture
def banking(config, logged_in_store, http) -> BankingClient:
    return BankingClient(config, logged_in_store, http=http)


def _call(http):
    """Return (method, url, kwargs) of the last request."""
    args = http.request.call_args
    return args.args[0], args.args[1], args.kwargs


ACCOUNT = {
    "id": 1,
    "accountNumber": "ACC001",
    "accountType": "CHECKING",
    "status": "ACTIVE",
    "balance": 100.0,
}

TRANSACTION = {
    "id": 5,
    "transactionType": "TRANSFER",
    "status": "PENDING_APPROVAL",
    "amount": 15000.0,
    "fromAccount": {"id": 1, "accountNumber": "ACC001"},
    "toAccount": {"id": 2, "accountNumber": "ACC002"},
}


class TestBankingClient:
    """Tests for client construction."""

    def test_default_store_is_file_backed(self, config, http):
        client = BankingClient(config, http=http)

        assert isinstance(client.store, FileSessionStore)
        assert client.store.path == config.session_path

    def test_session_property_reads_store(self, banking, session):
        assert banking.session == session


class TestAuthClient:
    """Tests for /auth endpoints."""

    def test_login_saves_session(self, config, store, http, make_response, make_token):
        token = make_token()
        http.request.return_value = make_response(
            200,
            {
                "token": token,
                "userId": 3,
                "username": "bob",
                "roles": ["ROLE_TELLER", "ROLE_CUSTOMER"],
            },
        )
        client = BankingClient(config, store, http=http)

        session = client.auth.login("bob", "secret")

        method, url, kwargs = _call(http)
        assert method == "POST"
        assert url == "http://bank.test/auth/login"
        assert kwargs["json"] == {"username": "bob", "password": "secret"}
        assert session.token == token
        assert session.roles == frozenset({Role.TELLER, Role.CUSTOMER})
        assert store.load() == session

    def test_failed_login_stores_nothing(self, config, store, http, make_response):
        http.request.return_value = make_response(401, {"message": "Bad credentials"})
        client = BankingClient(config, store, http=http)

        with pytest.raises(AuthenticationError):
            client.auth.login("bob", "wrong")

        assert store.load() is None

    def test_register_posts_camel_case(self, banking, http, make_response, make_token):
        http.request.return_value = make_response(
            200, {"token": make_token(), "userId": 9, "username": "carol"}
        )
        request = RegisterRequest(
            username="carol",
            email="carol@example.com",
            password="secret1",
            first_name="Carol",
            last_name="Jones",
        )

        result = banking.auth.register(request)

        _, url, kwargs = _call(http)
        assert url == "http://bank.test/auth/register"
        assert kwargs["json"]["firstName"] == "Carol"
        assert kwargs["json"]["lastName"] == "Jones"
        assert "phoneNumber" not in kwargs["json"]
        assert result.user_id == 9

    def test_me_refreshes_stored_user(self, banking, http, make_response, session):
        http.request.return_value = make_response(
            200, {"id": 7, "username": "alice", "roles": ["ROLE_MANAGER"]}
        )

        user = banking.auth.me()

        assert user.roles == frozenset({Role.MANAGER})
        assert banking.session.token == session.token
        assert banking.session.roles == frozenset({Role.MANAGER})

    def test_logout_clears_store(self, banking):
        banking.auth.logout()
        assert banking.session is None


class TestAccountsClient:
    """Tests for /accounts."""

    def test_list_for_user(self, banking, http, make_response):
        http.request.return_value = make_response(200, [ACCOUNT])

        accounts = banking.accounts.list_for_user(7)

        method, url, _ = _call(http)
        assert (method, url) == ("GET", "http://bank.test/api/accounts/user/7")
        assert accounts[0].account_number == "ACC001"
        assert accounts[0].account_type is AccountType.CHECKING

    def test_transfer_payload(self, banking, http, make_response):
        http.request.return_value = make_response(
            200, {"success": True, "message": "Transfer completed"}
        )
        request = TransferRequest(
            from_account_number="ACC001", to_account_number="ACC002", amount=25.5
        )

        result = banking.accounts.transfer(request)

        method, url, kwargs = _call(http)
        assert (method, url) == ("POST", "http://bank.test/api/accounts/transfer")
        assert kwargs["json"] == {
            "fromAccountNumber": "ACC001",
            "toAccountNumber": "ACC002",
            "amount": 25.5,
        }
        assert result.message == "Transfer completed"

    def test_transfer_with_text_response(self, banking, http, make_response):
        http.request.return_value = make_response(200, text="Transfer completed")
        request = TransferRequest(
            from_account_number="ACC001", to_account_number="ACC002", amount=1
        )

        assert banking.accounts.transfer(request) is None

    def test_set_status_uses_query_param(self, banking, http, make_response):
        http.request.return_value = make_response(200, {**ACCOUNT, "status": "FROZEN"})

        account = banking.accounts.set_status(1, AccountStatus.FROZEN)

        method, url, kwargs = _call(http)
        assert (method, url) == ("PATCH", "http://bank.test/api/accounts/1/status")
        assert kwargs["params"] == {"status": "FROZEN"}
        assert account.status is AccountStatus.FROZEN

    def test_create(self, banking, http, make_response):
        http.request.return_value = make_response(200, ACCOUNT)
        request = CreateAccountRequest(
            account_type=AccountType.SAVINGS, user_id=7, initial_balance=50
        )

        banking.accounts.create(request)

        _, _, kwargs = _call(http)
        assert kwargs["json"] == {
            "accountType": "SAVINGS",
            "userId": 7,
            "initialBalance": 50.0,
        }

    def test_exists(self, banking, http, make_response):
        http.request.return_value = make_response(200, {"exists": True})

        assert banking.accounts.exists("ACC001") is True
        _, url, _ = _call(http)
        assert url == "http://bank.test/api/accounts/exists/ACC001"


class TestTransactionsClient:
    """Tests for /transactions."""

    def test_pending_approval_flattens_accounts(self, banking, http, make_response):
        http.request.return_value = make_response(200, [TRANSACTION])

        pending = banking.transactions.pending_approval()

        assert pending[0].from_account == "ACC001"
        assert pending[0].to_account == "ACC002"
        assert pending[0].status.is_pending

    def test_approve_body(self, banking, http):
        banking.transactions.approve(5, manager_id=42, comments="ok")

        method, url, kwargs = _call(http)
        assert (method, url) == ("POST", "http://bank.test/api/transactions/5/approve")
        assert kwargs["json"] == {"managerId": 42, "comments": "ok"}

    def test_reject_body(self, banking, http):
        banking.transactions.reject(5, manager_id=42, reason="Suspicious")

        _, url, kwargs = _call(http)
        assert url == "http://bank.test/api/transactions/5/reject"
        assert kwargs["json"] == {"managerId": 42, "reason": "Suspicious"}

    def test_cancel_sends_user_and_reason(self, banking, http, make_response):
        http.request.return_value = make_response(
            200, {**TRANSACTION, "status": "CANCELLED"}
        )

        cancelled = banking.transactions.cancel(5, user_id=7, reason="Wrong amount")

        method, url, kwargs = _call(http)
        assert (method, url) == ("POST", "http://bank.test/api/transactions/5/cancel")
        assert kwargs["params"] == {"userId": 7, "reason": "Wrong amount"}
        assert cancelled.id == 5

    def test_recent_for_user_limit(self, banking, http, make_response):
        http.request.return_value = make_response(200, [])

        banking.transactions.recent_for_user(7, limit=20)

        _, url, kwargs = _call(http)
        assert url == "http://bank.test/api/transactions/user/7/recent"
        assert kwargs["params"] == {"limit": 20}


class TestGroupsClient:
    """Tests for /groups."""

    def test_transfer_uses_query_params(self, banking, http):
        banking.groups.transfer(3, "ACC001", "ACC002", 10.0)

        method, url, kwargs = _call(http)
        assert (method, url) == ("POST", "http://bank.test/api/groups/3/transfer")
        assert kwargs["params"] == {
            "fromAccount": "ACC001",
            "toAccount": "ACC002",
            "amount": 10.0,
        }
        assert kwargs["json"] is None

    def test_create(self, banking, http, make_response):
        http.request.return_value = make_response(
            200, {"groupId": 3, "groupName": "Family", "owner": {"id": 7}}
        )
        request = CreateGroupRequest(
            group_name="Family", group_type=GroupType.FAMILY, owner_id=7
        )

        group = banking.groups.create(request)

        _, _, kwargs = _call(http)
        assert kwargs["json"] == {
            "groupName": "Family",
            "groupType": "FAMILY",
            "ownerId": 7,
        }
        assert group.id == 3

    def test_statistics(self, banking, http, make_response):
        http.request.return_value = make_response(
            200, {"totalAccounts": 2, "totalBalance": 300.0, "averageBalance": 150.0}
        )

        stats = banking.groups.statistics(3)

        assert stats.total_accounts == 2
        assert stats.average_balance == 150.0


class TestInterestClient:
    """Tests for /interest."""

    def test_change_strategy_body(self, banking, http):
        banking.interest.change_strategy(1, "COMPOUND")

        _, url, kwargs = _call(http)
        assert url == "http://bank.test/api/interest/accounts/1/change-strategy"
        assert kwargs["json"] == {"strategyName": "COMPOUND"}

    def test_compare_params(self, banking, http, make_response):
        http.request.return_value = make_response(200, {"difference": 1.5})

        result = banking.interest.compare(1, "SIMPLE", "COMPOUND")

        _, _, kwargs = _call(http)
        assert kwargs["params"] == {"strategy1": "SIMPLE", "strategy2": "COMPOUND"}
        assert result == {"difference": 1.5}

    def test_future_interest(self, banking, http, make_response):
        http.request.return_value = make_response(200, 12.34)

        assert banking.interest.future_interest(1, 6) == 12.34
        _, url, _ = _call(http)
        assert url == "http://bank.test/api/interest/accounts/1/future/6"


class TestUsersClient:
    """Tests for /users."""

    def test_set_status_bool_param(self, banking, http, make_response):
        http.request.return_value = make_response(
            200, {"id": 3, "username": "bob", "isActive": False}
        )

        user = banking.users.set_status(3, False)

        _, _, kwargs = _call(http)
        assert kwargs["params"] == {"isActive": "false"}
        assert user.is_active is False

    def test_add_role_uses_wire_name(self, banking, http, make_response):
        http.request.return_value = make_response(200, {"id": 3, "username": "bob"})

        banking.users.add_role(3, Role.TELLER)

        _, url, kwargs = _call(http)
        assert url == "http://bank.test/api/users/3/role"
        assert kwargs["params"] == {"role": "ROLE_TELLER"}


class TestFacadeClients:
    """Tests for /banking and /payments."""

    def test_facade_transfer(self, banking, http, make_response):
        http.request.return_value = make_response(
            200, {"success": True, "transactionId": "TX1"}
        )
        request = FacadeTransferRequest(
            from_account_number="ACC001", to_account_number="EXT9", amount=5
        )

        result = banking.banking.transfer(request)

        _, url, kwargs = _call(http)
        assert url == "http://bank.test/api/banking/transfer"
        assert kwargs["json"] == {
            "fromAccountNumber": "ACC001",
            "toAccountNumber": "EXT9",
            "amount": 5.0,
        }
        assert result.transaction_id == "TX1"

    def test_deposit(self, banking, http, make_response):
        http.request.return_value = make_response(
            200, {"success": True, "balance": 150.0}
        )

        result = banking.banking.deposit(
            AmountRequest(account_number="ACC001", amount=50)
        )

        _, url, _ = _call(http)
        assert url == "http://bank.test/api/banking/deposit"
        assert result.balance == 150.0
