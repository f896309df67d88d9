"""OAuth2 token lifecycle and per-session request state."""

import asyncio
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from .exceptions import AuthError, NotAuthenticatedError
from .logger import Logger
from .types import Credentials, Token, as_utc

TOKEN_PATH = "/v1/oauth2/access_token"

# Refresh once fewer than ten minutes of validity remain.
REFRESH_MARGIN = timedelta(seconds=600)


def needs_refresh(token: Token, now: Optional[datetime] = None) -> bool:
    """
    Check whether a token is due for refresh.

    Args:
        token: Current token
        now: Point in time to check, defaults to the current UTC time. Naive
            values are taken as UTC

    Returns:
        True once ``now >= issued_at + expires_in - 600s``
    """
    now = as_utc(now) if now else datetime.now(timezone.utc)
    return now >= token.expires_at - REFRESH_MARGIN


class Session:
    """
    Authentication state shared by every request of one client.

    Holds the credentials, the current token and the nonce counter. Token swaps
    and nonce increments happen under a lock, so the session can be used from
    concurrent tasks or threads. Login and refresh calls are serialized.
    """

    def __init__(
        self,
        credentials: Credentials,
        http: httpx.AsyncClient,
        logger: Logger,
        initial_nonce: Optional[int] = None,
    ):
        """
        Initialize session.

        Args:
            credentials: Client and account credentials
            http: HTTP client pointed at the Korbit API
            logger: Logger instance
            initial_nonce: Starting nonce, defaults to the current Unix time
        """
        self.credentials = credentials
        self._http = http
        self._logger = logger
        self._lock = threading.Lock()
        self._grant_lock = asyncio.Lock()
        self._token: Optional[Token] = None
        self._nonce = int(time.time()) if initial_nonce is None else initial_nonce

    # ===== Token =====

    @property
    def token(self) -> Optional[Token]:
        with self._lock:
            return self._token

    def is_authenticated(self) -> bool:
        return self.token is not None

    def use_token(self, token: Token) -> None:
        """Replace the current token, e.g. with one restored by the caller."""
        with self._lock:
            self._token = token

    def authorization(self) -> str:
        """
        Authorization header value for the current token.

        Raises:
            NotAuthenticatedError: If login has not completed yet
        """
        return self._require_token().authorization

    def needs_refresh(self, now: Optional[datetime] = None) -> bool:
        return needs_refresh(self._require_token(), now)

    def _require_token(self) -> Token:
        token = self.token
        if token is None:
            raise NotAuthenticatedError("no access token, call login() first")
        return token

    # ===== Nonce =====

    def next_nonce(self) -> int:
        """Increment the nonce and return the new value."""
        with self._lock:
            self._nonce += 1
            return self._nonce

    # ===== Grants =====

    async def login(self) -> Token:
        """
        Log in with the password grant.

        Raises:
            AuthError: On transport failure, error status, or an unreadable body
        """
        body = {
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret.get_secret_value(),
            "username": self.credentials.username,
            "password": self.credentials.password.get_secret_value(),
            "grant_type": "password",
        }
        async with self._grant_lock:
            token = await self._grant("login", body)
            self.use_token(token)
        self._logger.info("Logged in as %s, token valid until %s", self.credentials.username, token.expires_at)
        return token

    async def refresh(self) -> Token:
        """
        Exchange the refresh token for a new token.

        Raises:
            NotAuthenticatedError: If there is no token to refresh
            AuthError: On transport failure, error status, or an unreadable body
        """
        async with self._grant_lock:
            current = self._require_token()
            body = {
                "client_id": self.credentials.client_id,
                "client_secret": self.credentials.client_secret.get_secret_value(),
                "refresh_token": current.refresh_token.get_secret_value(),
                "grant_type": "refresh_token",
            }
            token = await self._grant("refresh token", body)
            self.use_token(token)
        self._logger.info("Refreshed access token, valid until %s", token.expires_at)
        return token

    async def _grant(self, operation: str, body: dict[str, Any]) -> Token:
        try:
            response = await self._http.post(TOKEN_PATH, data=body)
        except httpx.HTTPError as exc:
            self._logger.error("%s failed: %s", operation, exc)
            raise AuthError(f"{operation}: {exc}") from exc

        if not response.is_success:
            self._logger.error("%s failed with status %d", operation, response.status_code)
            raise AuthError(f"{operation}: status {response.status_code}")

        try:
            payload = response.json()
            return Token.model_validate({**payload, "issued_at": datetime.now(timezone.utc)})
        except (ValueError, TypeError) as exc:
            raise AuthError(f"{operation}: unreadable token response") from exc
