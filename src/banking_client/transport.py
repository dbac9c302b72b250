"""HTTP transport shared by all resource clients.

Every request goes through ``ApiTransport.request``, which:

- attaches ``Authorization: Bearer <token>`` from the session store,
- maps error statuses onto ``banking_client.exceptions``,
- on a 401 to a request that carried a token, clears the stored session and
  fires ``on_session_expired`` once before raising ``SessionExpiredError``.

Login and registration are exempt from the 401 rule: a wrong password raises
``AuthenticationError`` and leaves the store untouched.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

import requests

from banking_client.config import PortalConfig
from banking_client.exceptions import (
    ApiError,
    AuthenticationError,
    SessionExpiredError,
    TransportError,
)
from banking_client.session import SessionStore

logger = logging.getLogger(__name__)


class Base(str, Enum):
    """Which base URL a path is relative to."""

    API = "api"
    AUTH = "auth"


class ApiTransport:
    """Thin wrapper around a ``requests.Session``."""

    def __init__(
        self,
        config: PortalConfig,
        store: SessionStore,
        on_session_expired: Callable[[], None] | None = None,
        http: requests.Session | None = None,
    ):
        self.config = config
        self.store = store
        self.on_session_expired = on_session_expired
        self.http = http or requests.Session()
        self.http.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )

    def url_for(self, path: str, base: Base = Base.API) -> str:
        root = self.config.auth_base_url if base is Base.AUTH else self.config.api_base_url
        return f"{root}/{path.lstrip('/')}"

    def _auth_headers(self) -> dict[str, str]:
        session = self.store.load()
        if session is None:
            return {}
        return {"Authorization": f"Bearer {session.token}"}

    def request(
        self,
        method: str,
        path: str,
        *,
        base: Base = Base.API,
        json: Any = None,
        params: dict[str, Any] | None = None,
        handle_unauthorized: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the chosen base URL.
            base: API or AUTH base URL.
            json: Optional JSON body.
            params: Optional query parameters; ``None`` values are dropped.
            handle_unauthorized: Apply the 401 logout rule.

        Returns:
            Decoded JSON, the raw text for non-JSON bodies, or None when the
            body is empty.

        Raises:
            TransportError: If the backend could not be reached.
            ApiError: (or a subclass) for error statuses.
        """
        url = self.url_for(path, base)
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        headers = self._auth_headers()
        logger.debug("%s %s", method, url)
        try:
            response = self.http.request(
                method,
                url,
                json=json,
                params=params or None,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
        except requests.Timeout as e:
            logger.warning("Timeout after %ss: %s %s", self.config.timeout_seconds, method, url)
            raise TransportError(f"Request timed out: {method} {url}") from e
        except requests.ConnectionError as e:
            logger.warning("Connection error: could not connect to %s", url)
            raise TransportError(f"Could not connect to {url}") from e
        except requests.RequestException as e:
            logger.warning("Request error for %s %s: %s", method, url, e)
            raise TransportError(str(e)) from e

        if response.status_code >= 400:
            error = ApiError.from_response(response)
            if (
                isinstance(error, AuthenticationError)
                and handle_unauthorized
                and headers
            ):
                self._expire_session()
                error = SessionExpiredError(
                    error.message, status_code=error.status_code, details=error.details
                )
            else:
                logger.warning(
                    "%s %s failed with %s: %s",
                    method,
                    url,
                    response.status_code,
                    error.message,
                )
            raise error

        return _decode_body(response)

    def _expire_session(self) -> None:
        logger.info("Session rejected by backend, logging out")
        self.store.clear()
        if self.on_session_expired is not None:
            self.on_session_expired()

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)

    def close(self) -> None:
        self.http.close()


def _decode_body(response: requests.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
