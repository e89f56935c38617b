"""
client/retroscore/services/session_controller.py

Purpose:
    One prediction round at a time: fetch a match, collect the prediction,
    submit it exactly once (manually or when the countdown runs out), show
    the result, start over.

    Submission is claimed with a single compare-and-set on ``_submitted``
    before any await, so a manual submit and a timer expiry delivered in the
    same loop iteration cannot both reach the network. Every network await
    captures the round generation; responses for a superseded round, or after
    ``dispose()``, are dropped.

    UI-facing operations never raise for NetworkError / ServerError /
    ValidationError. The exception lands on ``last_error``, its message on
    ``error``, and the phase is left interactive.

Dependencies:
    - asyncio
    - retroscore.providers.base.GameProvider
    - retroscore.services.countdown_timer
    - retroscore.services.input_surfaces
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any, Optional

from retroscore.errors import (
    NetworkError,
    RetroScoreError,
    ServerError,
    TimerConfigError,
    ValidationError,
)
from retroscore.models.match import MatchChallenge
from retroscore.models.prediction import (
    Outcome,
    PredictionMode,
    PredictionState,
    SessionPhase,
    SubmissionPayload,
    TimerState,
    build_payload,
)
from retroscore.models.result import RoundResult
from retroscore.models.settings import UserSettings
from retroscore.providers.base import GameProvider
from retroscore.services.countdown_timer import CountdownTimer, resolve_time_limit
from retroscore.services.input_surfaces import AWAY, HOME, OutcomeSelector, ScoreSelector

logger = logging.getLogger("retroscore.session")

Listener = Callable[[], None]

# The easy/hard toggle may flip before the match arrives; scores and outcomes only once playing.
_MODE_PHASES = frozenset({SessionPhase.loading, SessionPhase.load_failed, SessionPhase.playing})
_PLAY_PHASES = frozenset({SessionPhase.playing})


class SessionController:
    def __init__(
        self,
        api: GameProvider,
        *,
        time_limit: Any = None,
        mode: PredictionMode = PredictionMode.score,
        timer: Optional[CountdownTimer] = None,
    ) -> None:
        self._api = api
        self.timer = timer or CountdownTimer()

        self.config_error: Optional[TimerConfigError] = None
        try:
            self.time_limit = resolve_time_limit(time_limit)
        except TimerConfigError as exc:
            logger.warning("Invalid time limit %r, using default: %s", time_limit, exc)
            self.config_error = exc
            self.time_limit = resolve_time_limit(None)

        self.prediction = PredictionState(mode=mode)
        self.scores = ScoreSelector(on_change=self._on_score_changed)
        self.outcomes = OutcomeSelector(on_change=self._on_outcome_changed)

        self._phase = SessionPhase.loading
        self._match: Optional[MatchChallenge] = None
        self._result: Optional[RoundResult] = None
        self.last_error: Optional[RetroScoreError] = None
        self._loading = False
        self._submitted = False
        self._generation = 0
        self._disposed = False
        self._pending: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []

    @classmethod
    def from_settings(
        cls,
        api: GameProvider,
        user_settings: UserSettings,
        *,
        timer: Optional[CountdownTimer] = None,
    ) -> "SessionController":
        return cls(
            api,
            time_limit=user_settings.time_limit,
            mode=user_settings.difficulty.prediction_mode,
            timer=timer,
        )

    # --- read-only view ------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def match(self) -> Optional[MatchChallenge]:
        return self._match

    @property
    def result(self) -> Optional[RoundResult]:
        return self._result

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def submitted(self) -> bool:
        return self._submitted

    @property
    def mode(self) -> PredictionMode:
        return self.prediction.mode

    @property
    def error(self) -> Optional[str]:
        if self.last_error is not None:
            return self.last_error.user_message
        if self.config_error is not None:
            return self.config_error.user_message
        return None

    @property
    def timer_state(self) -> TimerState:
        return self.timer.state()

    @property
    def can_submit(self) -> bool:
        return (
            self._phase == SessionPhase.playing
            and self._match is not None
            and not self._submitted
            and not self._loading
        )

    @property
    def can_start_next(self) -> bool:
        return not self._loading and self._phase in (
            SessionPhase.result,
            SessionPhase.load_failed,
            SessionPhase.playing,
        )

    # --- observers -----------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Session listener failed")

    # --- round lifecycle -----------------------------------------------

    async def start_round(self) -> bool:
        """Enter a fresh round and fetch its match. Returns True once playing."""
        if self._disposed:
            return False
        if self._loading:
            logger.debug("start_round ignored: request already in flight")
            return False

        self._generation += 1
        generation = self._generation
        self.timer.arm(self.time_limit)
        self._phase = SessionPhase.loading
        self._loading = True
        self._match = None
        self._result = None
        self._submitted = False
        self.last_error = None
        self.prediction.reset()
        self.scores.reset()
        self.outcomes.reset()
        self._notify()

        try:
            match = await self._api.fetch_random_match()
        except (NetworkError, ServerError) as exc:
            if self._is_stale(generation):
                return False
            self._loading = False
            self._phase = SessionPhase.load_failed
            self._record_error(exc)
            self._notify()
            return False

        if self._is_stale(generation):
            logger.info("Dropping match %s fetched for a superseded round", match.match_id)
            return False

        self._loading = False
        self._match = match
        self.outcomes.bind_teams(match.home_team.name, match.away_team.name)
        self._phase = SessionPhase.playing
        self.timer.start(self.time_limit, self._on_timer_expired, self._on_timer_tick)
        logger.info(
            "Round %d playing: match %s, %ds, mode=%s",
            generation, match.match_id, self.time_limit, self.prediction.mode.value,
        )
        self._notify()
        return True

    async def retry(self) -> bool:
        """Manual retry from the loading-failed screen."""
        if self._phase != SessionPhase.load_failed:
            return False
        return await self.start_round()

    async def next_round(self) -> bool:
        """Next match, from the result screen, an error, or skipping the current one."""
        if not self.can_start_next:
            logger.debug("next_round ignored in phase %s", self._phase.value)
            return False
        return await self.start_round()

    def dispose(self) -> None:
        """Tear down: stop the timer and ignore anything still in flight."""
        if self._disposed:
            return
        self._disposed = True
        self._generation += 1
        self.timer.stop()
        self._loading = False
        for task in list(self._pending):
            task.cancel()
        self._listeners.clear()
        logger.debug("Session disposed")

    async def drain(self) -> None:
        """Wait for background submissions (timer-triggered) to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def clear_error(self) -> None:
        self.last_error = None
        self.config_error = None
        self._notify()

    # --- input ---------------------------------------------------------

    def _accepting_input(self, phases=_PLAY_PHASES) -> bool:
        return self._phase in phases and not self._submitted and not self._disposed

    def set_mode(self, mode: PredictionMode | str) -> bool:
        mode = PredictionMode(mode)
        if not self._accepting_input(_MODE_PHASES):
            logger.debug("set_mode ignored in phase %s", self._phase.value)
            return False
        if mode != self.prediction.mode:
            self.prediction.mode = mode
            self._notify()
        return True

    def set_score(self, side: str, value: int) -> bool:
        if not self._accepting_input() or self.prediction.mode != PredictionMode.score:
            return False
        self.scores.select(side, value)
        return True

    def step_score(self, side: str, delta: int) -> bool:
        if not self._accepting_input() or self.prediction.mode != PredictionMode.score:
            return False
        self.scores.step(side, delta)
        return True

    def select_outcome(self, outcome: Outcome | str) -> bool:
        if not self._accepting_input() or self.prediction.mode != PredictionMode.outcome:
            return False
        self.outcomes.select(outcome)
        return True

    def _on_score_changed(self, side: str, value: int) -> None:
        if side == HOME:
            self.prediction.home_score = value
        elif side == AWAY:
            self.prediction.away_score = value
        self._notify()

    def _on_outcome_changed(self, outcome: Outcome, _label: str) -> None:
        self.prediction.outcome = outcome
        self._notify()

    # --- submission ----------------------------------------------------

    def _claim_submission(self) -> bool:
        """Compare-and-set: the first caller wins the round's only submission."""
        if self._submitted:
            return False
        self._submitted = True
        return True

    async def submit(self) -> Optional[RoundResult]:
        """User tapped submit. Returns the result, or None if nothing was sent or it failed."""
        if self._phase != SessionPhase.playing or self._match is None or self._disposed:
            logger.debug("submit ignored in phase %s", self._phase.value)
            return None
        if self._submitted:
            logger.info("submit ignored: round already submitted")
            return None

        try:
            payload = build_payload(self._match, self.prediction, time_is_up=self.timer.expired)
        except ValidationError as exc:
            self._record_error(exc)
            self._notify()
            return None

        if not self._claim_submission():
            return None
        self._begin_submission()
        return await self._send(payload, self._generation)

    def _on_timer_expired(self) -> None:
        if self._disposed or self._phase != SessionPhase.playing or self._match is None:
            return
        if not self._claim_submission():
            logger.info("Timer expired after the round was submitted, ignoring")
            return

        payload = build_payload(self._match, self.prediction, time_is_up=True)
        if not self._spawn(self._send(payload, self._generation)):
            self._submitted = False
            return
        logger.info("Time is up, auto-submitting round %d", self._generation)
        self._begin_submission()

    def _on_timer_tick(self, _remaining: int) -> None:
        self._notify()

    def _begin_submission(self) -> None:
        self._phase = SessionPhase.submitting
        self._loading = True
        self.last_error = None
        self._notify()

    async def _send(self, payload: SubmissionPayload, generation: int) -> Optional[RoundResult]:
        try:
            result = await self._api.submit_guess(payload)
        except (NetworkError, ServerError) as exc:
            if self._is_stale(generation):
                return None
            # Keep match and prediction so the user can resend.
            self._loading = False
            self._submitted = False
            self._phase = SessionPhase.playing
            self._record_error(exc)
            self._notify()
            return None

        if self._is_stale(generation):
            logger.info("Dropping result for superseded round %d", generation)
            return None

        self._loading = False
        self._result = result
        self._phase = SessionPhase.result
        self.timer.stop()
        self._notify()
        return result

    def _spawn(self, coro: Coroutine) -> bool:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("No running event loop, cannot submit")
            coro.close()
            return False
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._task_done)
        return True

    def _task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background submission failed", exc_info=exc)

    # --- helpers -------------------------------------------------------

    def _is_stale(self, generation: int) -> bool:
        return self._disposed or generation != self._generation

    def _record_error(self, exc: RetroScoreError) -> None:
        self.last_error = exc
        logger.warning("%s: %s", type(exc).__name__, exc)
