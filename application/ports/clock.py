"""
Workout Clock Interface (Port).

Part of AMA-271: Workout Simulation Mode

Abstraction over time so the engine can run on wall-clock time in
production, on accelerated virtual time in simulation, and on a manually
advanced clock in tests.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Protocol


TimerCallback = Callable[[], None]


@dataclass(eq=False)
class TimerHandle:
    """
    Handle for one repeating timer.

    ``active`` flips to False synchronously on cancel; clocks check it before
    every fire so a cancelled timer can never deliver another tick.
    """
    interval_seconds: float
    callback: TimerCallback
    active: bool = True
    # Clock-specific scheduling state (e.g. the pending asyncio handle)
    native: Optional[Any] = field(default=None, repr=False)

    def fire(self) -> None:
        if self.active:
            self.callback()


class WorkoutClock(Protocol):
    """
    Abstract clock used by the engine and the simulated input provider.

    Exactly one repeating timer is active per clock: scheduling a new one
    invalidates the previous handle.
    """

    @property
    def speed_multiplier(self) -> float:
        """1.0 for real time, > 1.0 for accelerated virtual time."""
        ...

    def now(self) -> datetime:
        """Current (possibly virtual) timestamp, timezone-aware UTC."""
        ...

    def schedule_repeating(self, interval_seconds: float, callback: TimerCallback) -> TimerHandle:
        """
        Start a repeating timer, cancelling any prior one.

        Args:
            interval_seconds: Interval in real-world-equivalent seconds;
                implementations clamp non-positive values instead of failing
            callback: Invoked once per interval

        Returns:
            Handle to pass to cancel()
        """
        ...

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        """Cancel a timer. Unknown or already-cancelled handles are a no-op."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task until ``seconds`` of clock time have passed."""
        ...
