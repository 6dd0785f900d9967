"""
Unit tests for infrastructure/clock/clocks.py

Part of AMA-271: Workout Simulation Mode
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from infrastructure.clock import MIN_INTERVAL_SECONDS, AcceleratedClock, RealClock

pytestmark = pytest.mark.unit

START = datetime(2026, 1, 5, 7, 0, tzinfo=timezone.utc)


class TestAcceleratedClockBasics:
    def test_multiplier_clamped_to_one(self):
        assert AcceleratedClock(0.5).speed_multiplier == 1.0
        assert AcceleratedClock(10).speed_multiplier == 10.0

    def test_now_is_virtual_start(self):
        assert AcceleratedClock(10, start_time=START).now() == START

    def test_tick_period_compressed(self):
        clock = AcceleratedClock(10)

        assert clock.tick_period(1.0) == pytest.approx(0.1)
        assert RealClock().tick_period(1.0) == 1.0

    @pytest.mark.asyncio
    async def test_non_positive_interval_is_clamped(self):
        clock = AcceleratedClock(10)
        fired = asyncio.Event()

        def on_tick():
            clock.cancel(handle)
            fired.set()

        handle = clock.schedule_repeating(0, on_tick)
        await asyncio.wait_for(fired.wait(), timeout=1)

        assert handle.interval_seconds == MIN_INTERVAL_SECONDS

    @pytest.mark.asyncio
    async def test_sleep_advances_virtual_time(self):
        clock = AcceleratedClock(1000, start_time=START)

        await clock.sleep(30)

        assert clock.now() == START + timedelta(seconds=30)

    @pytest.mark.asyncio
    async def test_negative_sleep_is_zero(self):
        clock = AcceleratedClock(1000, start_time=START)

        await clock.sleep(-5)

        assert clock.now() == START


class TestAcceleratedClockTimers:
    @pytest.mark.asyncio
    async def test_ticks_advance_full_interval(self):
        clock = AcceleratedClock(1000, start_time=START)
        fired = []
        done = asyncio.Event()

        def on_tick():
            fired.append(clock.now())
            if len(fired) == 3:
                clock.cancel(handle)
                done.set()

        handle = clock.schedule_repeating(1.0, on_tick)
        await asyncio.wait_for(done.wait(), timeout=2)

        assert fired == [START + timedelta(seconds=n) for n in (1, 2, 3)]
        assert clock.active_timer is None
        assert handle.active is False

    @pytest.mark.asyncio
    async def test_cancel_inside_callback_stops_rearming(self):
        clock = AcceleratedClock(1000, start_time=START)
        fired = []

        def on_tick():
            fired.append(1)
            clock.cancel(handle)

        handle = clock.schedule_repeating(1.0, on_tick)
        await asyncio.sleep(0.05)

        assert fired == [1]

    @pytest.mark.asyncio
    async def test_new_schedule_cancels_previous(self):
        clock = AcceleratedClock(1000, start_time=START)
        first = clock.schedule_repeating(1.0, lambda: None)
        second = clock.schedule_repeating(1.0, lambda: None)

        assert first.active is False
        assert clock.active_timer is second
        clock.cancel(second)

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self):
        clock = AcceleratedClock(1000)
        handle = clock.schedule_repeating(1.0, lambda: None)

        clock.cancel(handle)
        clock.cancel(handle)
        clock.cancel(None)

        assert clock.active_timer is None

    @pytest.mark.asyncio
    async def test_sixty_virtual_seconds_at_ten_x(self, monkeypatch):
        """At 10x, 60 ticks of 1s take 6 real seconds and move virtual time 60s."""
        clock = AcceleratedClock(10, start_time=START)
        loop = asyncio.get_running_loop()
        delays = []
        pending = []

        def fake_call_later(delay, callback, *args):
            delays.append(delay)
            pending.append((callback, args))
            return loop.call_soon(lambda: None)

        monkeypatch.setattr(loop, "call_later", fake_call_later)
        ticks = []
        handle = clock.schedule_repeating(1.0, lambda: ticks.append(clock.now()))

        while len(ticks) < 60:
            callback, args = pending.pop(0)
            callback(*args)
        clock.cancel(handle)

        assert sum(delays[:60]) == pytest.approx(6.0)
        assert clock.now() == START + timedelta(seconds=60)
        assert ticks[-1] == START + timedelta(seconds=60)


class TestRealClock:
    def test_now_is_utc(self):
        assert RealClock().now().tzinfo == timezone.utc

    def test_speed_is_one(self):
        assert RealClock().speed_multiplier == 1.0

    @pytest.mark.asyncio
    async def test_timer_fires(self, monkeypatch):
        clock = RealClock()
        real_period = clock.tick_period
        scheduled = []

        def short_period(interval_seconds):
            scheduled.append(real_period(interval_seconds))
            return 0.01

        monkeypatch.setattr(clock, "tick_period", short_period)
        fired = asyncio.Event()

        def on_tick():
            clock.cancel(handle)
            fired.set()

        handle = clock.schedule_repeating(1.0, on_tick)
        await asyncio.wait_for(fired.wait(), timeout=1)

        assert scheduled == [1.0]
