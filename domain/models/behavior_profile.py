"""
Simulated user behavior and heart-rate profiles.

Part of AMA-271: Workout Simulation Mode
"""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ExerciseIntensity(str, Enum):
    """Exercise intensity levels for HR simulation."""

    REST = "rest"          # Recovery/rest periods
    LOW = "low"            # Warm-up, cooldown
    MODERATE = "moderate"  # Steady-state cardio
    HIGH = "high"          # High-intensity intervals
    MAX = "max"            # Maximum effort bursts


# Fraction of heart-rate reserve targeted at each intensity
_HR_RESERVE_FRACTION = {
    ExerciseIntensity.REST: 0.1,
    ExerciseIntensity.LOW: 0.5,
    ExerciseIntensity.MODERATE: 0.7,
    ExerciseIntensity.HIGH: 0.85,
    ExerciseIntensity.MAX: 0.95,
}


class HRProfile(BaseModel):
    """Heart rate simulation parameters."""

    model_config = ConfigDict(frozen=True)

    resting_hr: int = Field(..., gt=0, description="Resting heart rate in BPM")
    max_hr: int = Field(..., gt=0, description="Maximum heart rate in BPM")
    recovery_rate: float = Field(..., gt=0, description="Decay constant per minute of rest")

    @model_validator(mode="after")
    def check_range(self) -> "HRProfile":
        if self.max_hr <= self.resting_hr:
            raise ValueError("max_hr must be greater than resting_hr")
        return self

    def hr_for_intensity(self, intensity: ExerciseIntensity) -> int:
        reserve = self.max_hr - self.resting_hr
        return self.resting_hr + int(reserve * _HR_RESERVE_FRACTION[intensity])

    @classmethod
    def athletic(cls) -> "HRProfile":
        return cls(resting_hr=55, max_hr=185, recovery_rate=1.5)

    @classmethod
    def average(cls) -> "HRProfile":
        return cls(resting_hr=70, max_hr=175, recovery_rate=1.0)

    @classmethod
    def beginner(cls) -> "HRProfile":
        return cls(resting_hr=80, max_hr=165, recovery_rate=0.7)


class UserBehaviorProfile(BaseModel):
    """
    Defines simulated user behavior during a workout.

    Ranges are inclusive ``(low, high)`` tuples sampled uniformly.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "custom"
    rest_time_multiplier: Tuple[float, float] = Field(
        ..., description="Fraction of prescribed rest actually taken"
    )
    pause_probability: float = Field(..., ge=0, le=1)
    pause_duration: Tuple[float, float] = Field(..., description="Pause length in seconds")
    reaction_time: Tuple[float, float] = Field(
        ..., description="Delay in seconds before tapping next/done"
    )
    skip_probability: float = Field(..., ge=0, le=1)
    hr_profile: HRProfile

    @model_validator(mode="after")
    def check_ranges(self) -> "UserBehaviorProfile":
        for field in ("rest_time_multiplier", "pause_duration", "reaction_time"):
            low, high = getattr(self, field)
            if low < 0 or high < low:
                raise ValueError(f"{field} must be a non-negative (low, high) range")
        return self

    # -------------------------------------------------------------------------
    # Presets
    # -------------------------------------------------------------------------

    @classmethod
    def efficient(cls) -> "UserBehaviorProfile":
        """Minimal rest, fast reactions, rarely pauses."""
        return cls(
            name="efficient",
            rest_time_multiplier=(0.9, 1.0),
            pause_probability=0.05,
            pause_duration=(5, 15),
            reaction_time=(0.3, 1.0),
            skip_probability=0.02,
            hr_profile=HRProfile.athletic(),
        )

    @classmethod
    def casual(cls) -> "UserBehaviorProfile":
        """Normal rest times, occasional pauses."""
        return cls(
            name="casual",
            rest_time_multiplier=(1.0, 1.5),
            pause_probability=0.15,
            pause_duration=(15, 90),
            reaction_time=(1.0, 3.0),
            skip_probability=0.1,
            hr_profile=HRProfile.average(),
        )

    @classmethod
    def distracted(cls) -> "UserBehaviorProfile":
        """Extended rest, frequent pauses, sometimes skips."""
        return cls(
            name="distracted",
            rest_time_multiplier=(1.2, 2.5),
            pause_probability=0.3,
            pause_duration=(30, 180),
            reaction_time=(2.0, 8.0),
            skip_probability=0.15,
            hr_profile=HRProfile.average(),
        )

    @classmethod
    def named(cls, name: str) -> "UserBehaviorProfile":
        """Get a preset by name. Unknown names fall back to casual."""
        presets = {
            "efficient": cls.efficient,
            "casual": cls.casual,
            "distracted": cls.distracted,
        }
        return presets.get((name or "").lower(), cls.casual)()


BEHAVIOR_PROFILE_NAMES = ("efficient", "casual", "distracted")
