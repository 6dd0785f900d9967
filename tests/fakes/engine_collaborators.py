"""
Fake engine collaborators for testing.

Part of AMA-271: Workout Simulation Mode

In-memory implementations of StateBroadcaster, CompletionSink, CueProvider,
RemoteLink, HealthDataProvider and UserInputProvider that record what the
engine did to them.
"""
from typing import Any, Dict, List, Optional, Tuple

from application.ports.completion_sink import CompletionSubmissionError
from application.ports.remote import RemoteLinkUnavailable
from domain.models.behavior_profile import ExerciseIntensity
from domain.models.completion import CompletionSummary, HealthMetrics
from domain.models.engine_state import CommandAck, WorkoutState
from domain.models.flattened_step import FlattenedStep


class FakeStateBroadcaster:
    """Records every broadcast snapshot and ack."""

    def __init__(self):
        self.states: List[WorkoutState] = []
        self.acks: List[CommandAck] = []

    @property
    def versions(self) -> List[int]:
        return [state.stateVersion for state in self.states]

    @property
    def last_state(self) -> Optional[WorkoutState]:
        return self.states[-1] if self.states else None

    def broadcast_state(self, state: WorkoutState) -> None:
        self.states.append(state)

    def broadcast_ack(self, ack: CommandAck) -> None:
        self.acks.append(ack)

    def reset(self) -> None:
        self.states.clear()
        self.acks.clear()


class FakeCompletionSink:
    """Collects submitted summaries; optionally fails every submission."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.summaries: List[CompletionSummary] = []

    @property
    def last(self) -> Optional[CompletionSummary]:
        return self.summaries[-1] if self.summaries else None

    def submit(self, summary: CompletionSummary) -> None:
        self.summaries.append(summary)
        if self.fail:
            raise CompletionSubmissionError("completions API unavailable")


class FakeCueProvider:
    """Records cues as (name, *args) tuples."""

    def __init__(self):
        self.events: List[Tuple[Any, ...]] = []

    def names(self) -> List[str]:
        return [event[0] for event in self.events]

    def countdowns(self) -> List[int]:
        return [event[1] for event in self.events if event[0] == "countdown"]

    def workout_started(self, workout_name: str) -> None:
        self.events.append(("workout_started", workout_name))

    def announce_step(self, step: FlattenedStep) -> None:
        self.events.append(("announce_step", step.label))

    def countdown(self, seconds_remaining: int) -> None:
        self.events.append(("countdown", seconds_remaining))

    def rest_started(self, rest_seconds: Optional[int]) -> None:
        self.events.append(("rest_started", rest_seconds))

    def paused(self) -> None:
        self.events.append(("paused",))

    def resumed(self) -> None:
        self.events.append(("resumed",))

    def workout_completed(self) -> None:
        self.events.append(("workout_completed",))


class FakeRemoteLink:
    """Companion link whose reachability tests can toggle."""

    def __init__(self, name: str = "watch", reachable: bool = True):
        self._name = name
        self.reachable = reachable
        self.sent: List[Dict[str, Any]] = []

    @property
    def name(self) -> str:
        return self._name

    def send(self, message: Dict[str, Any]) -> None:
        if not self.reachable:
            raise RemoteLinkUnavailable(f"{self._name} is not reachable")
        self.sent.append(message)

    def messages(self, action: str) -> List[Dict[str, Any]]:
        return [m for m in self.sent if m.get("action") == action]


class FakeHealthDataProvider:
    """Returns canned metrics and records what it was told."""

    def __init__(self, metrics: Optional[HealthMetrics] = None, current_hr: int = 70):
        self.metrics = metrics or HealthMetrics(avg_heart_rate=120, max_heart_rate=160, active_calories=42)
        self._current_hr = current_hr
        self.work: List[Tuple[float, ExerciseIntensity]] = []
        self.rest: List[float] = []
        self.reset_count = 0

    @property
    def current_hr(self) -> int:
        return self._current_hr

    def record_work(self, duration_seconds: float, intensity: ExerciseIntensity) -> None:
        self.work.append((duration_seconds, intensity))

    def record_rest(self, duration_seconds: float) -> None:
        self.rest.append(duration_seconds)

    def summary(self) -> HealthMetrics:
        return self.metrics

    def reset(self) -> None:
        self.reset_count += 1
        self.work.clear()
        self.rest.clear()


class FakeUserInput:
    """
    Scripted input provider: every wait resolves immediately.

    ``reps`` are returned in order by wait_for_reps_entry (the target when
    exhausted); ``pauses``/``skips`` are consumed one per decision point.
    """

    def __init__(
        self,
        reps: Optional[List[int]] = None,
        pauses: Optional[List[bool]] = None,
        skips: Optional[List[bool]] = None,
    ):
        self._reps = list(reps or [])
        self._pauses = list(pauses or [])
        self._skips = list(skips or [])
        self.calls: List[str] = []
        self.cancelled = 0

    async def wait_for_advance(self) -> None:
        self.calls.append("advance")

    async def wait_for_reps_entry(self, target: int) -> int:
        self.calls.append("reps")
        return self._reps.pop(0) if self._reps else target

    async def wait_for_ready_after_rest(self) -> None:
        self.calls.append("ready")

    async def wait_for_resume(self) -> None:
        self.calls.append("resume")

    def should_inject_pause(self) -> bool:
        return self._pauses.pop(0) if self._pauses else False

    def should_inject_skip(self) -> bool:
        return self._skips.pop(0) if self._skips else False

    def cancel_pending(self) -> None:
        self.cancelled += 1
