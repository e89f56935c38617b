"""
client/retroscore/services/countdown_timer.py

Purpose:
    Round countdown. Remaining time is derived from a deadline on the
    injected clock, never from a decrementing counter, so a delayed or
    backgrounded event loop catches up on the next tick instead of drifting.
    ``on_expire`` fires exactly once per start/reset cycle.

Dependencies:
    - asyncio
    - retroscore.config
    - retroscore.models.settings (named duration presets)
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable
from typing import Any, Optional

from retroscore.config import settings
from retroscore.errors import TimerConfigError
from retroscore.models.prediction import TimerState
from retroscore.models.settings import TimerDuration

logger = logging.getLogger("retroscore.timer")

ExpireCallback = Callable[[], None]
TickCallback = Callable[[int], None]

_USE_SETTINGS = object()


def parse_duration(value: Any) -> int:
    """Accept positive seconds, a TimerDuration member or its name ("THIRTY_SECONDS")."""
    if isinstance(value, TimerDuration):
        return int(value.value)
    if isinstance(value, bool):
        raise TimerConfigError(f"invalid timer duration: {value!r}")
    if isinstance(value, int):
        if value <= 0:
            raise TimerConfigError(f"timer duration must be positive, got {value}")
        return value
    if isinstance(value, str):
        raw = value.strip()
        if raw in TimerDuration.__members__:
            return int(TimerDuration[raw].value)
        if raw.isdigit() and int(raw) > 0:
            return int(raw)
    raise TimerConfigError(f"invalid timer duration: {value!r}")


def resolve_time_limit(value: Any, default: Any = None) -> int:
    """Duration for a round: the user's setting, or the configured default when unset.

    An unset value (None / "") falls back. A set but unusable value is an error,
    not a silent fallback.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        fallback = settings.DEFAULT_TIME_LIMIT_SECONDS if default is None else default
        return parse_duration(fallback)
    return parse_duration(value)


class CountdownTimer:
    """Deadline-based countdown with exactly-once expiry.

    With a numeric ``tick_interval`` and a running event loop, ``start`` spawns
    a task that ticks on that interval. ``tick_interval=None`` leaves ticking
    to the owner (call ``tick()``).
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        tick_interval: Any = _USE_SETTINGS,
    ) -> None:
        self._clock = clock
        self._tick_interval: Optional[float] = (
            settings.TIMER_TICK_SECONDS if tick_interval is _USE_SETTINGS else tick_interval
        )
        self._duration = 0
        self._deadline = 0.0
        self._remaining = 0
        self._expired = False
        self._running = False
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._on_expire: Optional[ExpireCallback] = None
        self._on_tick: Optional[TickCallback] = None

    # --- lifecycle -----------------------------------------------------

    def start(
        self,
        duration: Any,
        on_expire: ExpireCallback,
        on_tick: Optional[TickCallback] = None,
    ) -> None:
        seconds = parse_duration(duration)
        self._cancel_task()
        self._generation += 1
        self._duration = seconds
        self._deadline = self._clock() + seconds
        self._remaining = seconds
        self._expired = False
        self._running = True
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._spawn_loop()
        logger.debug("Timer started: %ds (cycle %d)", seconds, self._generation)

    def reset(self, duration: Any = None) -> None:
        """Restart with a fresh deadline, keeping the callbacks from ``start``."""
        if self._on_expire is None:
            raise RuntimeError("reset() before start()")
        self.start(
            self._duration if duration is None else duration,
            self._on_expire,
            self._on_tick,
        )

    def stop(self) -> None:
        """Cancel ticking. No callback fires after this returns."""
        self._generation += 1
        self._running = False
        self._cancel_task()

    def arm(self, duration: Any) -> None:
        """Stop and show a full, unexpired countdown without starting it."""
        seconds = parse_duration(duration)
        self.stop()
        self._duration = seconds
        self._remaining = seconds
        self._expired = False

    # --- ticking -------------------------------------------------------

    def tick(self) -> int:
        """Recompute remaining time from the deadline; fire expiry on reaching 0."""
        if not self._running:
            return self._remaining

        generation = self._generation
        remaining = max(0, math.ceil(self._deadline - self._clock()))
        remaining = min(remaining, self._remaining)  # never count back up
        changed = remaining != self._remaining
        self._remaining = remaining

        if changed and self._on_tick is not None:
            self._on_tick(remaining)
            if generation != self._generation:
                return self._remaining  # callback restarted or stopped us

        if remaining == 0:
            self._running = False
            self._expired = True
            logger.info("Timer expired after %ds", self._duration)
            if self._on_expire is not None:
                try:
                    self._on_expire()
                except Exception:
                    logger.exception("Timer expiry callback failed")
        return self._remaining

    def _spawn_loop(self) -> None:
        if self._tick_interval is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, timer ticks must be driven manually")
            return
        self._task = loop.create_task(self._run(self._generation))

    async def _run(self, generation: int) -> None:
        while self._running and generation == self._generation:
            await asyncio.sleep(self._tick_interval)
            if generation != self._generation:
                return
            self.tick()

    def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    # --- read-only view ------------------------------------------------

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def running(self) -> bool:
        return self._running

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def progress(self) -> float:
        if self._duration <= 0:
            return 0.0
        return self._remaining / self._duration

    @property
    def urgency(self) -> str:
        if self._remaining <= 5:
            return "critical"
        if self._remaining <= 10:
            return "warning"
        return "normal"

    def state(self) -> TimerState:
        return TimerState(remaining_seconds=self._remaining, expired=self._expired)
