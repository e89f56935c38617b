"""
client/tests/test_countdown_timer.py

Purpose:
    Countdown semantics: duration validation, deadline-based remaining time,
    monotonic ticks, exactly-once expiry, reset and stop.
"""

from __future__ import annotations

import asyncio

import pytest

from retroscore.config import settings
from retroscore.errors import TimerConfigError
from retroscore.models.settings import TimerDuration
from retroscore.services.countdown_timer import CountdownTimer, parse_duration, resolve_time_limit


class _FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _timer(clock: _FakeClock) -> CountdownTimer:
    return CountdownTimer(clock=clock, tick_interval=None)


@pytest.mark.parametrize(
    "value,expected",
    [
        (30, 30),
        (TimerDuration.TEN_SECONDS, 10),
        ("FORTY_FIVE_SECONDS", 45),
        ("15", 15),
    ],
)
def test_parse_duration_accepts_seconds_and_presets(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", [None, 0, -5, "", "ELEVEN_SECONDS", "abc", True, 1.5])
def test_parse_duration_rejects_invalid(value):
    with pytest.raises(TimerConfigError):
        parse_duration(value)


def test_resolve_time_limit_falls_back_only_when_unset(monkeypatch):
    monkeypatch.setattr(settings, "DEFAULT_TIME_LIMIT_SECONDS", 25)
    assert resolve_time_limit(None) == 25
    assert resolve_time_limit("  ") == 25
    assert resolve_time_limit("TWENTY_SECONDS") == 20
    with pytest.raises(TimerConfigError):
        resolve_time_limit("SOON")


def test_start_with_invalid_duration_does_not_run():
    clock = _FakeClock()
    timer = _timer(clock)
    fired: list[bool] = []

    with pytest.raises(TimerConfigError):
        timer.start(None, lambda: fired.append(True))

    clock.advance(100)
    timer.tick()
    assert not timer.running
    assert not timer.expired
    assert fired == []


def test_ticks_are_monotonic_and_expiry_fires_once():
    clock = _FakeClock()
    timer = _timer(clock)
    ticks: list[int] = []
    expired_at: list[int] = []

    timer.start(3, lambda: expired_at.append(timer.remaining_seconds), ticks.append)
    assert timer.remaining_seconds == 3

    for _ in range(6):
        clock.advance(1)
        timer.tick()

    assert ticks == [2, 1, 0]
    assert expired_at == [0]
    assert timer.expired
    assert not timer.running


def test_remaining_time_follows_deadline_after_suspension():
    clock = _FakeClock()
    timer = _timer(clock)
    fired: list[bool] = []
    timer.start(30, lambda: fired.append(True))

    clock.advance(12.4)
    assert timer.tick() == 18

    # App was backgrounded far past the deadline: one tick catches up.
    clock.advance(100)
    assert timer.tick() == 0
    assert fired == [True]


def test_remaining_never_counts_back_up():
    clock = _FakeClock()
    timer = _timer(clock)
    timer.start(30, lambda: None)

    clock.advance(5)
    assert timer.tick() == 25
    clock.now -= 3
    assert timer.tick() == 25


def test_reset_restarts_cycle_and_rearms_expiry():
    clock = _FakeClock()
    timer = _timer(clock)
    fired: list[bool] = []
    timer.start(5, lambda: fired.append(True))

    clock.advance(4)
    timer.tick()
    timer.reset(10)
    assert timer.remaining_seconds == 10
    assert not timer.expired

    clock.advance(5)
    timer.tick()
    assert fired == []

    clock.advance(5)
    timer.tick()
    assert fired == [True]

    # Expiry is once per cycle; a reset arms it again.
    timer.reset()
    clock.advance(10)
    timer.tick()
    assert fired == [True, True]


def test_reset_before_start_is_an_error():
    with pytest.raises(RuntimeError):
        _timer(_FakeClock()).reset(10)


def test_stop_prevents_any_callback():
    clock = _FakeClock()
    timer = _timer(clock)
    fired: list[bool] = []
    timer.start(5, lambda: fired.append(True))

    timer.stop()
    clock.advance(100)
    timer.tick()

    assert fired == []
    assert timer.remaining_seconds == 5
    assert not timer.running


def test_arm_shows_full_countdown_without_running():
    clock = _FakeClock()
    timer = _timer(clock)
    fired: list[bool] = []
    timer.start(3, lambda: fired.append(True))
    clock.advance(3)
    timer.tick()
    assert timer.expired

    timer.arm(12)
    assert timer.state().remaining_seconds == 12
    assert not timer.state().expired
    assert not timer.running
    assert timer.duration == 12

    clock.advance(100)
    assert timer.tick() == 12
    assert fired == [True]


def test_expiry_callback_failure_is_contained():
    clock = _FakeClock()
    timer = _timer(clock)

    def boom():
        raise RuntimeError("boom")

    timer.start(1, boom)
    clock.advance(1)
    assert timer.tick() == 0
    assert timer.expired


def test_urgency_and_progress():
    clock = _FakeClock()
    timer = _timer(clock)
    timer.start(20, lambda: None)
    assert timer.urgency == "normal"
    assert timer.progress == 1.0

    clock.advance(10)
    timer.tick()
    assert timer.urgency == "warning"
    assert timer.progress == 0.5

    clock.advance(5)
    timer.tick()
    assert timer.urgency == "critical"
    assert timer.state().remaining_seconds == 5
    assert timer.state().expired is False


@pytest.mark.asyncio
async def test_background_loop_ticks_until_expiry():
    clock = _FakeClock()
    timer = CountdownTimer(clock=clock, tick_interval=0.01)
    fired: list[bool] = []
    timer.start(2, lambda: fired.append(True))

    clock.advance(2)
    for _ in range(50):
        if fired:
            break
        await asyncio.sleep(0.01)

    assert fired == [True]
    assert timer.remaining_seconds == 0


@pytest.mark.asyncio
async def test_stopped_background_loop_never_fires():
    clock = _FakeClock()
    timer = CountdownTimer(clock=clock, tick_interval=0.01)
    fired: list[bool] = []
    timer.start(2, lambda: fired.append(True))

    timer.stop()
    clock.advance(10)
    await asyncio.sleep(0.05)

    assert fired == []
