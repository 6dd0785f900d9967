"""
Interval value objects - the declarative description of a workout step.

An interval tree is a closed tagged union discriminated by ``kind``. The wire
format matches what the companion apps exchange:

    {"kind": "warmup", "seconds": 300, "target": "Easy pace"}
    {"kind": "reps", "sets": 3, "reps": 10, "name": "Squat", "load": "80%", "restSec": 60}
    {"kind": "repeat", "reps": 4, "intervals": [...]}
    {"kind": "rest"}                      # manual rest ("tap when ready")

Intervals are pure data; flattening lives in domain.services.interval_flattener.
"""

from typing import Annotated, Any, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _IntervalBase(BaseModel):
    """Shared config: intervals are immutable value objects."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    def to_wire(self) -> dict:
        """Serialize to the companion wire format, omitting absent fields."""
        return self.model_dump(mode="json", exclude_none=True)


class WarmupInterval(_IntervalBase):
    kind: Literal["warmup"] = "warmup"
    seconds: int = Field(..., ge=0, description="Warm-up duration in seconds")
    target: Optional[str] = Field(default=None, description="Display target (e.g. 'Easy pace')")


class CooldownInterval(_IntervalBase):
    kind: Literal["cooldown"] = "cooldown"
    seconds: int = Field(..., ge=0, description="Cool-down duration in seconds")
    target: Optional[str] = None


class TimeInterval(_IntervalBase):
    kind: Literal["time"] = "time"
    seconds: int = Field(..., ge=0, description="Work duration in seconds")
    target: Optional[str] = Field(default=None, description="Exercise name or effort target")


class DistanceInterval(_IntervalBase):
    """Distance step. Displayed but never auto-advanced."""

    kind: Literal["distance"] = "distance"
    meters: int = Field(..., ge=0)
    target: Optional[str] = None


class RepsInterval(_IntervalBase):
    """
    Rep-based exercise, optionally performed for several sets.

    restSec semantics:
    - None: manual rest between sets (wait for explicit continue)
    - 0: no rest
    - > 0: timed countdown rest
    """

    kind: Literal["reps"] = "reps"
    sets: Optional[int] = Field(default=None, ge=1, description="Number of sets (None = 1)")
    reps: int = Field(..., ge=0, description="Target reps per set")
    name: str = Field(..., description="Exercise name")
    load: Optional[str] = Field(default=None, description="Load description (e.g. '80%', '24 kg')")
    restSec: Optional[int] = Field(default=None, ge=0, description="Rest between sets in seconds")
    followAlongUrl: Optional[str] = Field(default=None, description="Follow-along video URL")

    @property
    def total_sets(self) -> int:
        return self.sets or 1

    @property
    def rest_seconds(self) -> Optional[int]:
        return self.restSec


class RestInterval(_IntervalBase):
    """Explicit rest node. seconds=None means manual rest."""

    kind: Literal["rest"] = "rest"
    seconds: Optional[int] = Field(default=None, ge=0)

    @property
    def is_manual(self) -> bool:
        return self.seconds is None


class RepeatInterval(_IntervalBase):
    """A round group: ``intervals`` are performed ``reps`` times."""

    kind: Literal["repeat"] = "repeat"
    reps: int = Field(..., ge=1, description="Number of rounds")
    intervals: List["Interval"] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return self.reps

    @property
    def children(self) -> List["Interval"]:
        return self.intervals


Interval = Annotated[
    Union[
        WarmupInterval,
        CooldownInterval,
        TimeInterval,
        DistanceInterval,
        RepsInterval,
        RestInterval,
        RepeatInterval,
    ],
    Field(discriminator="kind"),
]

RepeatInterval.model_rebuild()

INTERVAL_KINDS = ("warmup", "cooldown", "time", "reps", "distance", "repeat", "rest")

_interval_list_adapter = TypeAdapter(List[Interval])


def parse_intervals(data: Optional[Iterable[Any]]) -> List[Interval]:
    """
    Parse a JSON-compatible list of interval dicts into Interval models.

    Args:
        data: List of interval dicts (or None)

    Returns:
        List of Interval models

    Raises:
        pydantic.ValidationError: On unknown kinds or invariant violations
    """
    if data is None:
        return []
    return _interval_list_adapter.validate_python(list(data))


def intervals_to_wire(intervals: Iterable[Interval]) -> List[dict]:
    """Serialize intervals back to the companion wire format."""
    return [interval.to_wire() for interval in intervals]
