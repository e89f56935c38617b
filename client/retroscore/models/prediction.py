"""
client/retroscore/models/prediction.py

Purpose:
    In-progress prediction state, round phases and the guess payload sent to
    the backend. ``build_payload`` owns the timeout default: an outcome that
    was never picked is submitted as a draw once time is up, and rejected
    locally while time remains.

Dependencies:
    - pydantic
    - retroscore.errors
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from retroscore.errors import ValidationError
from retroscore.models.match import MatchChallenge


class PredictionMode(str, Enum):
    score = "score"        # hard mode: exact score pair
    outcome = "outcome"    # easy mode: home win / draw / away win


class Outcome(str, Enum):
    home_win = "home_win"
    draw = "draw"
    away_win = "away_win"
    unset = "unset"


class SessionPhase(str, Enum):
    loading = "loading"
    load_failed = "load_failed"
    playing = "playing"
    submitting = "submitting"
    result = "result"


class PredictionState(BaseModel):
    """The user's answer for the current round. Mutated by the active input surface only."""
    mode: PredictionMode = PredictionMode.score
    home_score: int = Field(default=0, ge=0)
    away_score: int = Field(default=0, ge=0)
    outcome: Outcome = Outcome.unset

    model_config = ConfigDict(validate_assignment=True)

    @property
    def has_outcome(self) -> bool:
        return self.outcome != Outcome.unset

    def reset(self) -> None:
        self.home_score = 0
        self.away_score = 0
        self.outcome = Outcome.unset


class TimerState(BaseModel):
    model_config = ConfigDict(frozen=True)

    remaining_seconds: int
    expired: bool = False


class SubmissionPayload(BaseModel):
    """Body of ``POST /game/guess``. Exactly one representation is filled, picked by the mode."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    match_id: str
    predicted_home_score: Optional[int] = None
    predicted_away_score: Optional[int] = None
    time_is_up: bool = False
    is_easy_mode: bool = False
    match_result: Optional[Outcome] = None

    @model_validator(mode="after")
    def _one_representation(self):
        if self.is_easy_mode:
            if self.match_result in (None, Outcome.unset):
                raise ValueError("easy mode payload needs a match result")
            if self.predicted_home_score is not None or self.predicted_away_score is not None:
                raise ValueError("easy mode payload must not carry scores")
        else:
            if self.predicted_home_score is None or self.predicted_away_score is None:
                raise ValueError("hard mode payload needs both scores")
            if self.match_result is not None:
                raise ValueError("hard mode payload must not carry a match result")
        return self

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def build_payload(
    match: MatchChallenge,
    prediction: PredictionState,
    *,
    time_is_up: bool,
) -> SubmissionPayload:
    """Turn the current prediction into a guess payload.

    Raises ValidationError when an outcome prediction is still unset and the
    round clock has not run out.
    """
    if prediction.mode == PredictionMode.outcome:
        outcome = prediction.outcome
        if outcome == Outcome.unset:
            if not time_is_up:
                raise ValidationError("outcome not selected")
            outcome = Outcome.draw
        return SubmissionPayload(
            match_id=match.match_id,
            time_is_up=time_is_up,
            is_easy_mode=True,
            match_result=outcome,
        )

    return SubmissionPayload(
        match_id=match.match_id,
        predicted_home_score=prediction.home_score,
        predicted_away_score=prediction.away_score,
        time_is_up=time_is_up,
        is_easy_mode=False,
    )
