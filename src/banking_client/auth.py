"""Authentication endpoints (/auth)."""

import logging

from banking_client.schemas import AuthResponse, LoginRequest, RegisterRequest, User
from banking_client.session import Session
from banking_client.transport import ApiTransport, Base

logger = logging.getLogger(__name__)


class AuthClient:
    def __init__(self, transport: ApiTransport):
        self._transport = transport

    def login(self, username: str, password: str) -> Session:
        """Log in and persist the resulting session.

        Raises:
            AuthenticationError: If the credentials are rejected. The stored
                session is left untouched in that case.
        """
        payload = LoginRequest(username=username, password=password).to_payload()
        data = self._transport.post(
            "/login", base=Base.AUTH, json=payload, handle_unauthorized=False
        )
        session = Session.from_auth_response(AuthResponse.model_validate(data))
        self._transport.store.save(session)
        logger.info("Logged in as %s", session.user.username)
        return session

    def register(self, request: RegisterRequest) -> AuthResponse:
        data = self._transport.post(
            "/register",
            base=Base.AUTH,
            json=request.to_payload(),
            handle_unauthorized=False,
        )
        return AuthResponse.model_validate(data)

    def me(self) -> User:
        """Fetch the current profile and refresh the stored copy."""
        user = User.model_validate(self._transport.get("/me", base=Base.AUTH))
        session = self._transport.store.load()
        if session is not None:
            self._transport.store.save(Session(token=session.token, user=user))
        return user

    def logout(self) -> None:
        """Forget the stored session. The backend keeps no logout state."""
        self._transport.store.clear()
