"""Entry point of the banking client.

Usage:
    from banking_client import BankingClient, load_config

    client = BankingClient(load_config())
    session = client.auth.login("alice", "secret")
    accounts = client.accounts.list_for_user(session.user.id)
"""

from collections.abc import Callable

import requests

from banking_client.auth import AuthClient
from banking_client.config import PortalConfig, load_config
from banking_client.resources import (
    AccountsClient,
    BankingFacadeClient,
    DecoratorsClient,
    GroupsClient,
    InterestClient,
    NotificationsClient,
    PaymentsClient,
    TransactionsClient,
    UsersClient,
)
from banking_client.session import FileSessionStore, Session, SessionStore
from banking_client.transport import ApiTransport


class BankingClient:
    """Typed client exposing one sub-client per backend resource.

    Without an explicit ``store`` the session is persisted to
    ``config.session_path`` so that command-line use survives restarts.
    """

    def __init__(
        self,
        config: PortalConfig | None = None,
        store: SessionStore | None = None,
        on_session_expired: Callable[[], None] | None = None,
        http: requests.Session | None = None,
    ):
        self.config = config or load_config()
        if store is None:
            store = FileSessionStore(self.config.session_path)
        self.store = store
        self.transport = ApiTransport(
            self.config,
            self.store,
            on_session_expired=on_session_expired,
            http=http,
        )

        self.auth = AuthClient(self.transport)
        self.accounts = AccountsClient(self.transport)
        self.transactions = TransactionsClient(self.transport)
        self.interest = InterestClient(self.transport)
        self.decorators = DecoratorsClient(self.transport)
        self.groups = GroupsClient(self.transport)
        self.users = UsersClient(self.transport)
        self.notifications = NotificationsClient(self.transport)
        self.banking = BankingFacadeClient(self.transport)
        self.payments = PaymentsClient(self.transport)

    @property
    def session(self) -> Session | None:
        return self.store.load()

    def close(self) -> None:
        self.transport.close()
