"""
asyncio-backed WorkoutClock implementations.

Part of AMA-271: Workout Simulation Mode

- RealClock: wall-clock time, ticks at the requested interval
- AcceleratedClock: virtual time; ticks every interval / multiplier real
  seconds while advancing virtual time by the full interval per tick

Both must be driven from a running event loop. Timers are call_later
chains re-armed after each fire; a handle cancelled from inside its own
callback is never re-armed.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from application.ports.clock import TimerCallback, TimerHandle

logger = logging.getLogger(__name__)

# Shortest timer interval; non-positive intervals are clamped to it
MIN_INTERVAL_SECONDS = 0.001


class _LoopClock:
    """Shared single-timer scheduling on an asyncio loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._active: Optional[TimerHandle] = None

    @property
    def speed_multiplier(self) -> float:
        return 1.0

    @property
    def active_timer(self) -> Optional[TimerHandle]:
        return self._active

    def tick_period(self, interval_seconds: float) -> float:
        """Real seconds between fires of a timer with this interval."""
        return interval_seconds / self.speed_multiplier

    def schedule_repeating(self, interval_seconds: float, callback: TimerCallback) -> TimerHandle:
        """Start the single repeating timer. Intervals below MIN_INTERVAL_SECONDS are clamped."""
        if interval_seconds < MIN_INTERVAL_SECONDS:
            logger.warning(f"Timer interval {interval_seconds}s clamped to {MIN_INTERVAL_SECONDS}s")
            interval_seconds = MIN_INTERVAL_SECONDS
        self.cancel(self._active)
        handle = TimerHandle(interval_seconds=interval_seconds, callback=callback)
        self._active = handle
        self._arm(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is None or not handle.active:
            return
        handle.active = False
        if handle.native is not None:
            handle.native.cancel()
            handle.native = None
        if self._active is handle:
            self._active = None

    def _arm(self, handle: TimerHandle) -> None:
        loop = self._loop or asyncio.get_running_loop()
        handle.native = loop.call_later(self.tick_period(handle.interval_seconds), self._fire, handle)

    def _fire(self, handle: TimerHandle) -> None:
        if not handle.active:
            return
        self._advance(handle.interval_seconds)
        try:
            handle.fire()
        finally:
            if handle.active:
                self._arm(handle)

    def _advance(self, seconds: float) -> None:
        """Hook for clocks that track their own time."""


class RealClock(_LoopClock):
    """Production clock - uses real system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))


class AcceleratedClock(_LoopClock):
    """
    Accelerated clock for simulation mode.

    Virtual time always advances in real-world-equivalent units; only the
    wall-clock wait is compressed by ``speed_multiplier``.
    """

    def __init__(
        self,
        speed_multiplier: float,
        start_time: Optional[datetime] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        super().__init__(loop=loop)
        if speed_multiplier < 1.0:
            logger.info(f"Speed multiplier {speed_multiplier} below 1x; clamping to 1.0")
        self._speed = max(1.0, float(speed_multiplier))  # Minimum 1x speed
        self._virtual_time = start_time or datetime.now(timezone.utc)

    @property
    def speed_multiplier(self) -> float:
        return self._speed

    def now(self) -> datetime:
        return self._virtual_time

    async def sleep(self, seconds: float) -> None:
        seconds = max(0.0, seconds)
        await asyncio.sleep(seconds / self._speed)
        self._advance(seconds)

    def _advance(self, seconds: float) -> None:
        self._virtual_time += timedelta(seconds=seconds)
