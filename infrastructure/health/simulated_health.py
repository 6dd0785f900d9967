"""
SimulatedHealthProvider - realistic heart rate curves and calorie estimates.

Part of AMA-271: Workout Simulation Mode

Work periods ramp HR toward the intensity target (fast rise, then plateau);
rest periods decay exponentially toward resting HR. One sample every 5
seconds with bounded noise. Calories are MET-based for a 70 kg adult.
"""
import logging
import math
import random
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from application.ports.health_provider import HRSample
from domain.models.behavior_profile import ExerciseIntensity, HRProfile
from domain.models.completion import HealthMetrics

logger = logging.getLogger(__name__)

SAMPLE_INTERVAL_SECONDS = 5.0
BODY_WEIGHT_KG = 70.0

_METS = {
    ExerciseIntensity.REST: 1.0,
    ExerciseIntensity.LOW: 2.5,
    ExerciseIntensity.MODERATE: 4.0,
    ExerciseIntensity.HIGH: 6.0,
    ExerciseIntensity.MAX: 8.0,
}


def calories_for(duration_seconds: float, intensity: ExerciseIntensity) -> float:
    """Calories = METs * weight(kg) * hours."""
    return _METS[intensity] * BODY_WEIGHT_KG * (duration_seconds / 3600.0)


class SimulatedHealthProvider:

    def __init__(
        self,
        profile: HRProfile,
        rng: Optional[random.Random] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._profile = profile
        self._rng = rng or random.Random()
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.reset()

    @property
    def profile(self) -> HRProfile:
        return self._profile

    @property
    def current_hr(self) -> int:
        return self._current_hr

    @property
    def samples(self) -> List[HRSample]:
        return list(self._samples)

    @property
    def total_calories(self) -> float:
        return self._calories

    def reset(self) -> None:
        self._current_hr = self._profile.resting_hr
        self._samples: List[HRSample] = []
        self._calories = 0.0
        self._cursor = self._now()

    def record_work(self, duration_seconds: float, intensity: ExerciseIntensity) -> None:
        if duration_seconds <= 0:
            return
        start_hr = self._current_hr
        target_hr = self._profile.hr_for_intensity(intensity)
        count = max(1, int(duration_seconds / SAMPLE_INTERVAL_SECONDS))

        for i in range(count + 1):
            progress = i / count
            curve = 1 - (1 - progress) ** 2
            base = start_hr + int((target_hr - start_hr) * curve)
            noisy = base + self._rng.randint(-3, 3)
            self._append(i, min(self._profile.max_hr, max(self._profile.resting_hr, noisy)))

        self._cursor += timedelta(seconds=duration_seconds)
        self._calories += calories_for(duration_seconds, intensity)

    def record_rest(self, duration_seconds: float) -> None:
        if duration_seconds <= 0:
            return
        start_hr = self._current_hr
        resting = self._profile.resting_hr
        count = max(1, int(duration_seconds / SAMPLE_INTERVAL_SECONDS))

        for i in range(count + 1):
            minutes = i * SAMPLE_INTERVAL_SECONDS / 60.0
            decay = math.exp(-self._profile.recovery_rate * minutes)
            hr = resting + (start_hr - resting) * decay
            self._append(i, max(resting, int(hr) + self._rng.randint(-2, 2)))

        self._cursor += timedelta(seconds=duration_seconds)
        self._calories += calories_for(duration_seconds, ExerciseIntensity.REST)

    def summary(self) -> HealthMetrics:
        if not self._samples:
            resting = self._profile.resting_hr
            return HealthMetrics(
                avg_heart_rate=resting,
                max_heart_rate=resting,
                min_heart_rate=resting,
                active_calories=int(self._calories),
                total_calories=int(self._calories),
            )
        values = [s.bpm for s in self._samples]
        return HealthMetrics(
            avg_heart_rate=sum(values) // len(values),
            max_heart_rate=max(values),
            min_heart_rate=min(values),
            active_calories=int(self._calories),
            total_calories=int(self._calories),
        )

    def _append(self, i: int, bpm: int) -> None:
        timestamp = self._cursor + timedelta(seconds=i * SAMPLE_INTERVAL_SECONDS)
        self._samples.append(HRSample(timestamp=timestamp, bpm=bpm))
        self._current_hr = bpm
