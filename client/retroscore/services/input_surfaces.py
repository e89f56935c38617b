"""
client/retroscore/services/input_surfaces.py

Purpose:
    State behind the two prediction inputs: the score-pair wheels (hard
    mode) and the home/draw/away picker (easy mode). They only hold a value
    and report changes; they never touch the network or the round phase.

    Score values are clamped to [SCORE_MIN, SCORE_MAX]. A scroll gesture past
    either end lands on the end value, it does not wrap.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional

from retroscore.config import settings
from retroscore.models.prediction import Outcome

logger = logging.getLogger("retroscore.input")

HOME = "home"
AWAY = "away"
DRAW_LABEL = "Draw"

ScoreCallback = Callable[[str, int], None]
OutcomeCallback = Callable[[Outcome, str], None]


class ScoreSelector:
    def __init__(
        self,
        on_change: Optional[ScoreCallback] = None,
        minimum: Optional[int] = None,
        maximum: Optional[int] = None,
    ) -> None:
        self.minimum = settings.SCORE_MIN if minimum is None else minimum
        self.maximum = settings.SCORE_MAX if maximum is None else maximum
        if self.minimum > self.maximum:
            raise ValueError("minimum must not exceed maximum")
        self._on_change = on_change
        self._values = {HOME: self.minimum, AWAY: self.minimum}

    @property
    def home(self) -> int:
        return self._values[HOME]

    @property
    def away(self) -> int:
        return self._values[AWAY]

    @property
    def choices(self) -> list[int]:
        return list(range(self.minimum, self.maximum + 1))

    def clamp(self, value: int) -> int:
        return max(self.minimum, min(self.maximum, int(value)))

    def select(self, side: str, value: int) -> int:
        if side not in self._values:
            raise ValueError(f"unknown side: {side}")
        clamped = self.clamp(value)
        if clamped != self._values[side]:
            self._values[side] = clamped
            if self._on_change is not None:
                self._on_change(side, clamped)
        return clamped

    def step(self, side: str, delta: int) -> int:
        return self.select(side, self._values[side] + delta)

    def select_index(self, side: str, index: int) -> int:
        """Wheel snapped to ``index`` (0 = first choice)."""
        return self.select(side, self.minimum + index)

    def reset(self, home: int = 0, away: int = 0) -> None:
        # Silent: the owner resets the prediction state itself.
        self._values[HOME] = self.clamp(home)
        self._values[AWAY] = self.clamp(away)


class OutcomeSelector:
    def __init__(self, on_change: Optional[OutcomeCallback] = None) -> None:
        self._on_change = on_change
        self._home_name = "Home"
        self._away_name = "Away"
        self._selected = Outcome.unset

    def bind_teams(self, home_name: str, away_name: str) -> None:
        self._home_name = home_name
        self._away_name = away_name

    @property
    def selected(self) -> Outcome:
        return self._selected

    def label(self, outcome: Outcome) -> str:
        if outcome == Outcome.home_win:
            return self._home_name
        if outcome == Outcome.away_win:
            return self._away_name
        if outcome == Outcome.draw:
            return DRAW_LABEL
        return ""

    @property
    def options(self) -> list[tuple[Outcome, str]]:
        return [(o, self.label(o)) for o in (Outcome.home_win, Outcome.draw, Outcome.away_win)]

    def select(self, outcome: Outcome | str) -> Outcome:
        outcome = Outcome(outcome)
        if outcome == Outcome.unset:
            raise ValueError("use reset() to clear the selection")
        self._selected = outcome
        if self._on_change is not None:
            self._on_change(outcome, self.label(outcome))
        return outcome

    def reset(self) -> None:
        self._selected = Outcome.unset
