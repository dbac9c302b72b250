"""Streamlit session wiring: session store, routing, client and alerts.

Everything the portal keeps between reruns lives in ``st.session_state``
under the keys below. The API client is built once per browser session and
shares the session store with the identity resolver, so a 401 seen by any
page clears the same session the sidebar reads.
"""

import logging

import streamlit as st

from banking_client import BankingClient, load_config
from banking_client.exceptions import BankingClientError, SessionExpiredError
from banking_client.logging import configure_logging
from banking_client.session import Session, load_active_session
from ui.feedback import SESSION_EXPIRED, error_message
from ui.navigation import LOGIN_PATH

logger = logging.getLogger(__name__)

SESSION_KEY = "bank_session"
ROUTE_KEY = "route"
CLIENT_KEY = "api_client"
FLASH_KEY = "flash_messages"
POLLER_KEY = "notification_poller"


class StreamlitSessionStore:
    """Session store backed by ``st.session_state``."""

    def load(self) -> Session | None:
        return st.session_state.get(SESSION_KEY)

    def save(self, session: Session) -> None:
        st.session_state[SESSION_KEY] = session

    def clear(self) -> None:
        st.session_state.pop(SESSION_KEY, None)


def current_path() -> str:
    return st.session_state.get(ROUTE_KEY, LOGIN_PATH)


def navigate(path: str) -> None:
    st.session_state[ROUTE_KEY] = path


def go(path: str) -> None:
    """Navigate and rerun immediately."""
    navigate(path)
    st.rerun()


def flash(message: str, level: str = "info") -> None:
    """Queue a message shown once at the top of the next render."""
    st.session_state.setdefault(FLASH_KEY, []).append((level, message))


def render_flash() -> None:
    for level, message in st.session_state.pop(FLASH_KEY, []):
        getattr(st, level, st.info)(message)


def stop_notification_poller() -> None:
    poller = st.session_state.pop(POLLER_KEY, None)
    if poller is not None:
        poller.stop()


def handle_session_expired() -> None:
    """Global 401 handler: the store is already cleared, go to login."""
    stop_notification_poller()
    navigate(LOGIN_PATH)
    flash(SESSION_EXPIRED, "warning")


def get_client() -> BankingClient:
    client = st.session_state.get(CLIENT_KEY)
    if client is None:
        config = load_config()
        configure_logging(config.log_level)
        client = BankingClient(
            config,
            StreamlitSessionStore(),
            on_session_expired=handle_session_expired,
        )
        st.session_state[CLIENT_KEY] = client
    return client


def get_session() -> Session | None:
    """Resolve the current identity; an expired token counts as logged out."""
    return load_active_session(StreamlitSessionStore())


def logout() -> None:
    session = get_session()
    if session is not None:
        logger.info("User %s logged out", session.user.username)
    stop_notification_poller()
    get_client().auth.logout()
    for key in list(st.session_state.keys()):
        if key != CLIENT_KEY:
            del st.session_state[key]
    navigate(LOGIN_PATH)


def show_error(error: BankingClientError, fallback: str) -> None:
    """Render an inline alert for ``error``.

    A 401 is not shown inline: the session has been cleared already, so the
    script is rerun and lands on the login page.
    """
    if isinstance(error, SessionExpiredError):
        st.rerun()
    st.error(error_message(error, fallback))
