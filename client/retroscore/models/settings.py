"""User preferences as stored by the backend (``GET /settings``)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from retroscore.models.prediction import PredictionMode


class TimerDuration(int, Enum):
    TEN_SECONDS = 10
    FIFTEEN_SECONDS = 15
    TWENTY_SECONDS = 20
    TWENTY_FIVE_SECONDS = 25
    THIRTY_SECONDS = 30
    FORTY_FIVE_SECONDS = 45


class Difficulty(str, Enum):
    EASY = "EASY"
    HARD = "HARD"

    @property
    def prediction_mode(self) -> PredictionMode:
        return PredictionMode.outcome if self is Difficulty.EASY else PredictionMode.score


# Fields accepted by PATCH /settings/{field}
SETTINGS_FIELDS = ("timeLimit", "difficulty", "league", "notifications", "hint")


class UserSettings(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    time_limit: Optional[str] = None      # TimerDuration name, e.g. "THIRTY_SECONDS"
    difficulty: Difficulty = Difficulty.HARD
    league: Optional[str] = None          # "epl", "laliga", "ucl"
    notifications: bool = True
    hint: bool = False
