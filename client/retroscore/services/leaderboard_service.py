"""
client/retroscore/services/leaderboard_service.py

Purpose:
    Loads the public leaderboard and the caller's own standing. Sparse boards
    can optionally be padded with synthetic placeholder rows; padding is a
    display policy applied here, after the fetch, and every padded row is
    flagged ``synthetic`` so it can never be mistaken for a ranked player.

Dependencies:
    - retroscore.providers.retroscore_api
    - retroscore.config (fallback switches)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from retroscore.config import settings
from retroscore.models.leaderboard import Leaderboard, LeaderboardEntry, UserStats
from retroscore.providers.retroscore_api import RetroScoreApi

logger = logging.getLogger("retroscore.leaderboard")

# Synthetic user ids start here so they never collide with real accounts.
_SYNTHETIC_ID_BASE = 1_000_000

_PLACEHOLDER_NAMES = (
    "GameMaster", "PredictionKing", "ScoreNinja", "FootballGuru",
    "MatchWizard", "GoalPredictor", "ChampionPlayer", "VictorySeeker",
    "TacticalGenius", "FieldExpert", "ProPredictor", "LeagueHero",
    "StadiumStar", "FantasyPro", "MatchMaker", "ScoreLegend",
    "GameChanger", "WinStreaker", "TopScorer", "ElitePlayer",
)


def apply_fallback(board: Leaderboard, min_real: int, pad_to: int) -> Leaderboard:
    """Pad a sparse board with placeholder rows ranked after the real ones.

    Returns a new Leaderboard; the input is left untouched. Real rows keep
    their order and ranks. Placeholder points decrease with rank and stay
    below the lowest real score.
    """
    real = [e for e in board.entries if not e.synthetic]
    if len(real) >= min_real or len(real) >= pad_to:
        return board

    floor = min((e.total_points for e in real), default=200)
    next_rank = max((e.rank for e in real), default=0) + 1
    padded = [e.model_copy() for e in real]
    for i in range(pad_to - len(real)):
        rank = next_rank + i
        padded.append(
            LeaderboardEntry(
                user_id=_SYNTHETIC_ID_BASE + rank,
                username=_PLACEHOLDER_NAMES[i % len(_PLACEHOLDER_NAMES)],
                total_points=max(0, floor - 8 * (i + 1)),
                games_played=0,
                win_percentage=0.0,
                rank=rank,
                synthetic=True,
            )
        )
    logger.info("Leaderboard padded: %d real + %d synthetic rows", len(real), len(padded) - len(real))
    return Leaderboard(entries=padded, total_users=board.total_users, fallback_applied=True)


@dataclass
class LeaderboardView:
    board: Leaderboard
    personal: Optional[UserStats]


class LeaderboardService:
    def __init__(self, api: RetroScoreApi, *, fallback_enabled: Optional[bool] = None) -> None:
        self._api = api
        self._fallback_enabled = (
            settings.LEADERBOARD_FALLBACK_ENABLED if fallback_enabled is None else fallback_enabled
        )

    async def load(self, page: int = 0) -> LeaderboardView:
        """Public board plus personal stats. Guests and expired sessions get the board only."""
        if self._api.session.has_valid_token:
            board, personal = await asyncio.gather(
                self._api.get_public_leaderboard(page=page),
                self._api.get_personal_leaderboard(),
            )
        else:
            board = await self._api.get_public_leaderboard(page=page)
            personal = None

        if self._fallback_enabled:
            board = apply_fallback(
                board,
                min_real=settings.LEADERBOARD_FALLBACK_MIN_REAL,
                pad_to=settings.LEADERBOARD_FALLBACK_PAD_TO,
            )
        return LeaderboardView(board=board, personal=personal)
