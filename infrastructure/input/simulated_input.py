"""
SimulatedUserInput - auto-advances with realistic delays.

Part of AMA-271: Workout Simulation Mode

Delays are sampled from a UserBehaviorProfile and spent on the workout
clock, so on an AcceleratedClock they cost only a fraction of real time.
"""
import logging
import random
from typing import Optional, Tuple

from application.ports.clock import WorkoutClock
from domain.models.behavior_profile import UserBehaviorProfile

logger = logging.getLogger(__name__)

# Rest assumed for manual rests, before the profile's multiplier
DEFAULT_MANUAL_REST_SECONDS = 60.0


class SimulatedUserInput:

    def __init__(
        self,
        clock: WorkoutClock,
        profile: UserBehaviorProfile,
        rng: Optional[random.Random] = None,
        manual_rest_seconds: float = DEFAULT_MANUAL_REST_SECONDS,
    ):
        self._clock = clock
        self._profile = profile
        self._rng = rng or random.Random()
        self._manual_rest_seconds = manual_rest_seconds

    @property
    def profile(self) -> UserBehaviorProfile:
        return self._profile

    async def wait_for_advance(self) -> None:
        await self._clock.sleep(self._sample(self._profile.reaction_time))

    async def wait_for_reps_entry(self, target: int) -> int:
        await self._clock.sleep(self._sample(self._profile.reaction_time))
        if target <= 0:
            return 0
        # Sometimes the user does one more or one fewer
        return max(1, target + self._rng.randint(-1, 1))

    async def wait_for_ready_after_rest(self) -> None:
        multiplier = self._sample(self._profile.rest_time_multiplier)
        await self._clock.sleep(self._manual_rest_seconds * multiplier)

    async def wait_for_resume(self) -> None:
        await self._clock.sleep(self._sample(self._profile.pause_duration))

    def should_inject_pause(self) -> bool:
        return self._rng.random() < self._profile.pause_probability

    def should_inject_skip(self) -> bool:
        return self._rng.random() < self._profile.skip_probability

    def cancel_pending(self) -> None:
        # Simulated waits are plain clock sleeps owned by the runner task
        pass

    def _sample(self, bounds: Tuple[float, float]) -> float:
        low, high = bounds
        return self._rng.uniform(low, high)
