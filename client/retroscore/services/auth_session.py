"""
client/retroscore/services/auth_session.py

Purpose:
    Explicit authentication session passed to the API client and the UI,
    created at login and destroyed at logout. A session without a token is a
    guest session: requests go out without a bearer header.

Dependencies:
    - PyJWT (unverified ``exp`` claim read)
    - retroscore.models.user
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import jwt
from jwt.exceptions import PyJWTError

from retroscore.errors import AuthError, LoginRequiredError
from retroscore.models.user import User
from retroscore.utils import utcnow

if TYPE_CHECKING:
    from retroscore.providers.retroscore_api import RetroScoreApi

logger = logging.getLogger("retroscore.auth")


class AuthSession:
    def __init__(self, token: Optional[str] = None, user: Optional[User] = None) -> None:
        self._token = token or None
        self._user = user

    @classmethod
    def guest(cls) -> "AuthSession":
        return cls()

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def is_guest(self) -> bool:
        return not self.is_authenticated

    def open(self, token: str, user: Optional[User]) -> None:
        if not token:
            raise ValueError("token must not be empty")
        self._token = token
        self._user = user

    def close(self) -> None:
        self._token = None
        self._user = None

    @property
    def token_expires_at(self) -> Optional[datetime]:
        """``exp`` claim of a JWT token, read without verification.

        The backend verifies signatures; the client only needs to know when to
        stop sending a token. Opaque (non-JWT) tokens have no expiry here.
        """
        if not self._token:
            return None
        try:
            claims = jwt.decode(self._token, options={"verify_signature": False})
        except PyJWTError:
            return None
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            return None
        return datetime.fromtimestamp(exp, tz=timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires_at = self.token_expires_at
        if expires_at is None:
            return False
        return (now or utcnow()) >= expires_at

    @property
    def has_valid_token(self) -> bool:
        """Signed in with a token the backend will still accept."""
        return self.is_authenticated and not self.is_expired()

    def bearer_token(self) -> Optional[str]:
        """Token to attach to requests, or None for guest / expired sessions."""
        if not self._token:
            return None
        if self.is_expired():
            logger.info("Session token expired, sending request as guest")
            return None
        return self._token


class AuthService:
    """Login / logout against the backend, mutating one injected AuthSession."""

    def __init__(self, api: "RetroScoreApi", session: AuthSession) -> None:
        self._api = api
        self.session = session

    async def login(self, google_token: str) -> User | None:
        response = await self._api.login_with_google(google_token)
        if not response.success or not response.token:
            logger.warning("Login rejected: %s", response.message)
            raise AuthError(response.message or "login rejected")
        self.session.open(response.token, response.user)
        logger.info("Logged in as %s", response.user.id if response.user else "unknown user")
        return response.user

    def logout(self) -> None:
        self.session.close()
        logger.info("Logged out")

    def require_login(
        self,
        message: str = LoginRequiredError.default_message,
        title: str = "Login Required",
    ) -> None:
        """Guard for account-only actions (personal stats, settings)."""
        if self.session.is_guest:
            raise LoginRequiredError(message, title=title)
