from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RoundResult(BaseModel):
    """Server verdict for one guess. Immutable once received."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    actual_home_score: int
    actual_away_score: int
    actual_match_result: Optional[str] = None   # "home_win", "draw", "away_win"
    is_correct_score: bool = False
    is_correct_result: bool = False
    user_game_points: int = 0
    result_message: str = ""

    @property
    def verdict(self) -> str:
        if self.is_correct_score and self.is_correct_result:
            return "Perfect Score!"
        if self.is_correct_result:
            return "Close Call!"
        return "Try Again!"
