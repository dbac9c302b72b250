"""Typed REST client for the bank portal backend."""

from banking_client.client import BankingClient
from banking_client.config import PortalConfig, load_config
from banking_client.exceptions import (
    ApiError,
    AuthenticationError,
    BankingClientError,
    NotFoundError,
    PermissionDeniedError,
    RequestValidationError,
    ServerError,
    SessionExpiredError,
    TransportError,
)
from banking_client.roles import Role
from banking_client.session import (
    FileSessionStore,
    MemorySessionStore,
    Session,
    SessionStore,
)

__all__ = [
    "ApiError",
    "AuthenticationError",
    "BankingClient",
    "BankingClientError",
    "FileSessionStore",
    "MemorySessionStore",
    "NotFoundError",
    "PermissionDeniedError",
    "PortalConfig",
    "RequestValidationError",
    "Role",
    "ServerError",
    "Session",
    "SessionExpiredError",
    "SessionStore",
    "TransportError",
    "load_config",
]
