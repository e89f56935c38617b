"""
client/tests/test_retroscore_api.py

Purpose:
    Wire contract of the backend client: paths, bodies, bearer handling for
    guest vs. authenticated sessions, and mapping of transport / HTTP / shape
    failures onto NetworkError and ServerError.
"""

from __future__ import annotations

import json
import logging

import httpx
import jwt
import pytest

from retroscore.errors import NetworkError, ServerError
from retroscore.models.prediction import Outcome, SubmissionPayload
from retroscore.models.settings import TimerDuration
from retroscore.models.user import User
from retroscore.providers.retroscore_api import RetroScoreApi
from retroscore.services.auth_session import AuthSession

_MATCH = {
    "matchId": 7,
    "homeTeam": {"name": "Leeds", "logoUrl": "/logos/lee.png"},
    "awayTeam": {"name": "Everton", "logoUrl": None},
    "matchDate": "2001-02-03T15:00:00",
    "stadiumName": "Elland Road",
}

_RESULT = {
    "actualHomeScore": 1,
    "actualAwayScore": 1,
    "actualMatchResult": "draw",
    "isCorrectScore": False,
    "isCorrectResult": True,
    "userGamePoints": 1,
    "resultMessage": "Right result",
}


def _api(handler, session: AuthSession | None = None) -> RetroScoreApi:
    return RetroScoreApi(
        session,
        base_url="http://game.test/api",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_guest_fetch_has_no_bearer_header():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_MATCH)

    async with _api(handler) as api:
        match = await api.fetch_random_match()

    assert match.match_id == "7"
    assert match.stadium_name == "Elland Road"
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/game/random-match"
    assert "authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_authenticated_submit_sends_bearer_and_payload():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_RESULT)

    session = AuthSession(token="opaque-token", user=User(id=1, email="a@b.c", name="A"))
    payload = SubmissionPayload(match_id="7", time_is_up=True, is_easy_mode=True, match_result=Outcome.draw)

    async with _api(handler, session) as api:
        result = await api.submit_guess(payload)

    assert result.is_correct_result
    assert result.verdict == "Close Call!"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/api/game/guess"
    assert request.headers["authorization"] == "Bearer opaque-token"
    assert json.loads(request.content) == {
        "matchId": "7",
        "predictedHomeScore": None,
        "predictedAwayScore": None,
        "timeIsUp": True,
        "isEasyMode": True,
        "matchResult": "draw",
    }


@pytest.mark.asyncio
async def test_expired_jwt_is_not_sent():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_MATCH)

    expired = jwt.encode({"sub": "1", "exp": 1_000_000}, "secret", algorithm="HS256")
    async with _api(handler, AuthSession(token=expired)) as api:
        await api.fetch_random_match()

    assert "authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_connect_failure_maps_to_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _api(handler) as api:
        with pytest.raises(NetworkError):
            await api.fetch_random_match()


@pytest.mark.asyncio
async def test_timeout_maps_to_network_error():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ReadTimeout("slow", request=request)

    payload = SubmissionPayload(match_id="7", predicted_home_score=1, predicted_away_score=0)
    async with _api(handler) as api:
        with pytest.raises(NetworkError):
            await api.submit_guess(payload)
    # Game calls are never retried by the client itself.
    assert calls == 1


@pytest.mark.asyncio
async def test_non_2xx_maps_to_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "maintenance"})

    async with _api(handler) as api:
        with pytest.raises(ServerError) as excinfo:
            await api.fetch_random_match()

    assert excinfo.value.status_code == 503
    assert excinfo.value.detail == {"error": "maintenance"}


@pytest.mark.asyncio
async def test_malformed_body_maps_to_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"homeTeam": {"name": "X"}})

    async with _api(handler) as api:
        with pytest.raises(ServerError):
            await api.fetch_random_match()


@pytest.mark.asyncio
async def test_non_json_body_maps_to_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>proxy error</html>")

    async with _api(handler) as api:
        with pytest.raises(ServerError):
            await api.submit_guess(SubmissionPayload(match_id="1", predicted_home_score=0, predicted_away_score=0))


@pytest.mark.asyncio
async def test_settings_read_and_patch():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"timeLimit": "FORTY_FIVE_SECONDS", "difficulty": "EASY", "hint": True})

    async with _api(handler, AuthSession(token="t")) as api:
        current = await api.get_settings()
        await api.update_setting("timeLimit", TimerDuration.FORTY_FIVE_SECONDS)
        await api.update_setting("hint", True)
        await api.update_setting("difficulty", "HARD")

    assert current.time_limit == "FORTY_FIVE_SECONDS"
    assert seen[0].url.path == "/api/settings"
    assert [r.method for r in seen[1:]] == ["PATCH", "PATCH", "PATCH"]
    assert seen[1].url.path == "/api/settings/timeLimit"
    assert seen[1].url.params["value"] == "FORTY_FIVE_SECONDS"
    assert seen[2].url.params["value"] == "true"
    assert seen[3].url.params["value"] == "HARD"


@pytest.mark.asyncio
async def test_unknown_settings_field_is_rejected_locally():
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("must not be called")

    async with _api(handler) as api:
        with pytest.raises(ValueError):
            await api.update_setting("theme", "dark")


@pytest.mark.asyncio
async def test_leaderboard_endpoints():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/leaderboard/public":
            assert request.url.params["page"] == "0"
            assert request.url.params["size"] == "20"
            return httpx.Response(
                200,
                json={
                    "entries": [{"userId": 3, "username": "kop", "totalPoints": 50, "rank": 1}],
                    "totalUsers": 1,
                },
            )
        return httpx.Response(200, json={"userId": 3, "rank": 1, "totalPoints": 50, "gamesPlayed": 9})

    async with _api(handler, AuthSession(token="t")) as api:
        board = await api.get_public_leaderboard()
        personal = await api.get_personal_leaderboard()

    assert board.entries[0].username == "kop"
    assert board.entries[0].synthetic is False
    assert personal.games_played == 9


@pytest.mark.asyncio
async def test_login_posts_to_server_root():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "token": "jwt",
                "message": "ok",
                "success": True,
                "user": {"id": "u1", "email": "x@y.z", "name": "X"},
            },
        )

    async with _api(handler) as api:
        response = await api.login_with_google("google-id-token")

    assert response.success
    assert seen[0].url.path == "/auth/google/mobile"
    assert json.loads(seen[0].content) == {"googleToken": "google-id-token"}


@pytest.mark.asyncio
async def test_responses_are_logged_without_query(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={})

    caplog.set_level(logging.INFO, logger="retroscore.http")
    async with _api(handler) as api:
        with pytest.raises(ServerError):
            await api.get_public_leaderboard(page=2)

    records = [r for r in caplog.records if r.name == "retroscore.http"]
    assert records
    line = json.loads(records[-1].getMessage())
    assert line["path"] == "/api/leaderboard/public"
    assert line["status"] == 404
    assert line["method"] == "GET"
    assert records[-1].levelno == logging.WARNING
