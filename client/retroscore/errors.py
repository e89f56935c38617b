"""
client/retroscore/errors.py

Purpose:
    Error taxonomy shared by the HTTP layer, the round timer and the session
    controller. Every error carries a message that can be shown to the user
    as-is.
"""

from __future__ import annotations

from typing import Any, Optional


class RetroScoreError(Exception):
    """Base class for all client errors."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None, *, user_message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message


class NetworkError(RetroScoreError):
    """No connectivity or the request timed out."""

    default_message = "Could not reach the game server. Check your connection and try again."


class ServerError(RetroScoreError):
    """Non-2xx response or a body that does not match the expected shape."""

    default_message = "The game server returned an error. Please try again."

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: Optional[int] = None,
        detail: Any = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message, user_message=user_message or self.default_message)
        self.status_code = status_code
        self.detail = detail


class ValidationError(RetroScoreError):
    """The local prediction is incomplete and cannot be submitted."""

    default_message = "Pick a result before submitting."


class TimerConfigError(RetroScoreError, ValueError):
    """Round duration is missing or not usable."""

    default_message = "The round time limit is not valid."


class LoginRequiredError(RetroScoreError):
    """A guest session tried an action that needs an account."""

    default_message = "You need to be logged in to access this feature."

    def __init__(self, message: str | None = None, *, title: str = "Login Required") -> None:
        super().__init__(message, user_message=message)
        self.title = title


class AuthError(RetroScoreError):
    """The backend rejected a login attempt."""

    default_message = "Login failed. Please try again."
