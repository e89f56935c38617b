"""
client/retroscore/providers/retroscore_api.py

Purpose:
    Thin async client for the RetroScore backend: random match, guess
    submission, user settings, leaderboards and mobile sign-in. Every call
    either returns a validated model or raises NetworkError / ServerError.

Dependencies:
    - retroscore.providers.http_client
    - retroscore.services.auth_session
    - retroscore.config
"""

import logging
from enum import Enum
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from retroscore.config import settings
from retroscore.errors import ServerError
from retroscore.models.leaderboard import Leaderboard, UserStats
from retroscore.models.match import MatchChallenge
from retroscore.models.prediction import SubmissionPayload
from retroscore.models.result import RoundResult
from retroscore.models.settings import SETTINGS_FIELDS, UserSettings
from retroscore.models.user import AuthResponse
from retroscore.providers.base import GameProvider
from retroscore.providers.http_client import ResilientClient
from retroscore.services.auth_session import AuthSession

logger = logging.getLogger("retroscore.api")

ModelT = TypeVar("ModelT", bound=BaseModel)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        # TimerDuration travels by name, string enums by value
        return value.name if isinstance(value.value, int) else str(value.value)
    return str(value)


class RetroScoreApi(GameProvider):
    """RetroScore backend client. Guest sessions call the API anonymously."""

    def __init__(
        self,
        session: Optional[AuthSession] = None,
        *,
        base_url: Optional[str] = None,
        client: Optional[ResilientClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session or AuthSession.guest()
        self._client = client or ResilientClient(
            "retroscore",
            base_url=base_url or settings.API_BASE_URL,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            max_retries=settings.HTTP_MAX_RETRIES,
            base_delay=settings.HTTP_BASE_DELAY_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "RetroScoreApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _parse(self, model: Type[ModelT], resp: httpx.Response, what: str) -> ModelT:
        try:
            return model.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as exc:
            logger.error("Malformed %s response: %s", what, exc)
            raise ServerError(
                f"malformed {what} response",
                status_code=resp.status_code,
                detail=str(exc),
            ) from exc

    # --- game ----------------------------------------------------------

    async def fetch_random_match(self) -> MatchChallenge:
        resp = await self._client.get("/game/random-match", token=self.session.bearer_token())
        match = self._parse(MatchChallenge, resp, "random match")
        logger.info(
            "Fetched match %s: %s vs %s",
            match.match_id, match.home_team.name, match.away_team.name,
        )
        return match

    async def submit_guess(self, payload: SubmissionPayload) -> RoundResult:
        resp = await self._client.post(
            "/game/guess",
            json=payload.to_wire(),
            token=self.session.bearer_token(),
        )
        result = self._parse(RoundResult, resp, "guess")
        logger.info(
            "Guess for match %s scored %d points (time_is_up=%s)",
            payload.match_id, result.user_game_points, payload.time_is_up,
        )
        return result

    # --- settings ------------------------------------------------------

    async def get_settings(self) -> UserSettings:
        resp = await self._client.get("/settings", token=self.session.bearer_token())
        return self._parse(UserSettings, resp, "settings")

    async def update_setting(self, field: str, value: Any) -> UserSettings:
        if field not in SETTINGS_FIELDS:
            raise ValueError(f"unknown settings field: {field}")
        resp = await self._client.patch(
            f"/settings/{field}",
            params={"value": _query_value(value)},
            token=self.session.bearer_token(),
        )
        return self._parse(UserSettings, resp, "settings")

    # --- leaderboard ---------------------------------------------------

    async def get_public_leaderboard(self, page: int = 0, size: Optional[int] = None) -> Leaderboard:
        resp = await self._client.get(
            "/leaderboard/public",
            params={"page": page, "size": size or settings.LEADERBOARD_PAGE_SIZE},
            token=self.session.bearer_token(),
        )
        return self._parse(Leaderboard, resp, "leaderboard")

    async def get_personal_leaderboard(self) -> UserStats:
        resp = await self._client.get("/leaderboard/personal", token=self.session.bearer_token())
        return self._parse(UserStats, resp, "personal leaderboard")

    # --- auth ----------------------------------------------------------

    async def login_with_google(self, google_token: str) -> AuthResponse:
        # Sign-in lives on the server root, not under /api.
        resp = await self._client.post(
            f"{settings.SERVER_URL.rstrip('/')}{settings.AUTH_LOGIN_PATH}",
            json={"googleToken": google_token},
        )
        return self._parse(AuthResponse, resp, "login")
