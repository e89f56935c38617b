from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: int
    username: str
    total_points: int = 0
    games_played: int = 0
    win_percentage: float = 0.0
    rank: int
    profile_picture_url: Optional[str] = None
    # Set only by the fallback filler, never by the backend.
    synthetic: bool = False


class Leaderboard(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    entries: List[LeaderboardEntry] = []
    total_users: int = 0
    fallback_applied: bool = False

    @property
    def real_entries(self) -> List[LeaderboardEntry]:
        return [e for e in self.entries if not e.synthetic]


class UserStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: Optional[int] = None
    username: Optional[str] = None
    rank: Optional[int] = None
    total_points: int = 0
    games_played: int = 0
    win_percentage: float = 0.0
