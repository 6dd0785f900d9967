"""
Tests for WorkoutSimulationRunner.

Part of AMA-271: Workout Simulation Mode

Runs real engines on an AcceleratedClock at 1000x, so a 30 second timed
step takes 30 ms of wall time.
"""

import asyncio
import random

import pytest

from application.engine import WorkoutEngine
from application.simulation import SimulationAborted, WorkoutSimulationRunner, intensity_for_step
from domain.models.behavior_profile import ExerciseIntensity, UserBehaviorProfile
from domain.models.completion import SimulationConfig
from domain.models.engine_state import EndReason, WorkoutPhase
from domain.models.execution_log import IntervalStatus
from domain.services import flatten_intervals
from infrastructure.clock import AcceleratedClock
from infrastructure.input import SimulatedUserInput
from tests.fakes import (
    FakeCompletionSink,
    FakeHealthDataProvider,
    FakeUserInput,
    create_simple_workout,
    make_workout,
)

RUN_TIMEOUT = 5


def make_engine(clock, sink=None, health=None, user_input=None, simulation_config=None):
    return WorkoutEngine(
        clock,
        user_input=user_input,
        completion_sink=sink,
        health_provider=health,
        simulation_config=simulation_config,
    )


@pytest.mark.unit
class TestRunnerWithScriptedInput:
    @pytest.mark.asyncio
    async def test_runs_simple_workout_to_completion(self):
        clock = AcceleratedClock(1000)
        sink = FakeCompletionSink()
        user_input = FakeUserInput(reps=[10, 8])
        engine = make_engine(clock, sink=sink, user_input=user_input)

        summary = await asyncio.wait_for(
            WorkoutSimulationRunner(engine, user_input).run(create_simple_workout()),
            timeout=RUN_TIMEOUT,
        )

        assert summary.end_reason == EndReason.COMPLETED
        assert summary.completed_steps == 4
        assert summary.total_steps == 4
        # warmup 30 + timed rest 15 + cooldown 30; manual rest and reps add no ticks
        assert summary.elapsed_seconds == 75
        assert user_input.calls == ["ready", "reps", "reps"]
        assert sink.last is summary
        assert engine.phase == WorkoutPhase.ENDED

    @pytest.mark.asyncio
    async def test_logged_reps_appear_in_execution_log(self):
        clock = AcceleratedClock(1000)
        user_input = FakeUserInput(reps=[10, 8])
        engine = make_engine(clock, user_input=user_input)

        summary = await asyncio.wait_for(
            WorkoutSimulationRunner(engine, user_input).run(create_simple_workout()),
            timeout=RUN_TIMEOUT,
        )

        intervals = summary.execution_log.intervals
        assert intervals[1].sets[0].reps_completed == 10
        assert intervals[2].sets[0].reps_completed == 8
        assert intervals[2].status == IntervalStatus.MODIFIED

    @pytest.mark.asyncio
    async def test_injected_pause_resumes(self):
        clock = AcceleratedClock(1000)
        user_input = FakeUserInput(pauses=[True])
        engine = make_engine(clock, user_input=user_input)

        summary = await asyncio.wait_for(
            WorkoutSimulationRunner(engine, user_input).run(create_simple_workout()),
            timeout=RUN_TIMEOUT,
        )

        assert user_input.calls[0] == "resume"
        assert summary.end_reason == EndReason.COMPLETED

    @pytest.mark.asyncio
    async def test_injected_skip_jumps_forward(self):
        clock = AcceleratedClock(1000)
        user_input = FakeUserInput(skips=[True])
        engine = make_engine(clock, user_input=user_input)

        summary = await asyncio.wait_for(
            WorkoutSimulationRunner(engine, user_input).run(create_simple_workout()),
            timeout=RUN_TIMEOUT,
        )

        assert summary.end_reason == EndReason.COMPLETED
        assert summary.completed_steps == 3
        assert summary.execution_log.intervals[0].status == IntervalStatus.SKIPPED

    @pytest.mark.asyncio
    async def test_health_recorded_per_step(self):
        clock = AcceleratedClock(1000)
        health = FakeHealthDataProvider()
        user_input = FakeUserInput()
        engine = make_engine(clock, health=health, user_input=user_input)

        await asyncio.wait_for(
            WorkoutSimulationRunner(engine, user_input, health).run(create_simple_workout()),
            timeout=RUN_TIMEOUT,
        )

        assert health.work == [
            (30, ExerciseIntensity.LOW),
            (30, ExerciseIntensity.MODERATE),
            (30, ExerciseIntensity.MODERATE),
            (30, ExerciseIntensity.LOW),
        ]
        assert 15 in health.rest

    @pytest.mark.asyncio
    async def test_distance_and_manual_rest_steps(self):
        clock = AcceleratedClock(1000)
        user_input = FakeUserInput()
        engine = make_engine(clock, user_input=user_input)
        workout = make_workout([
            {"kind": "distance", "meters": 400},
            {"kind": "rest"},
            {"kind": "reps", "reps": 5, "name": "Burpee"},
        ])

        summary = await asyncio.wait_for(
            WorkoutSimulationRunner(engine, user_input).run(workout),
            timeout=RUN_TIMEOUT,
        )

        assert summary.end_reason == EndReason.COMPLETED
        assert user_input.calls == ["advance", "advance", "reps"]

    @pytest.mark.asyncio
    async def test_empty_workout_completes_immediately(self):
        clock = AcceleratedClock(1000)
        user_input = FakeUserInput()
        engine = make_engine(clock, user_input=user_input)

        summary = await WorkoutSimulationRunner(engine, user_input).run(make_workout([]))

        assert summary.end_reason == EndReason.COMPLETED
        assert summary.total_steps == 0

    @pytest.mark.asyncio
    async def test_decision_budget_aborts(self):
        clock = AcceleratedClock(1000)
        user_input = FakeUserInput()
        engine = make_engine(clock, user_input=user_input)
        runner = WorkoutSimulationRunner(engine, user_input, max_decisions=1)

        with pytest.raises(SimulationAborted):
            await asyncio.wait_for(runner.run(create_simple_workout()), timeout=RUN_TIMEOUT)

        assert engine.end_reason == EndReason.ERROR
        assert engine.last_summary.end_reason == EndReason.ERROR


@pytest.mark.unit
class TestRunnerWithSimulatedInput:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("profile_name", ["efficient", "casual", "distracted"])
    async def test_profiles_finish(self, profile_name):
        clock = AcceleratedClock(1000)
        user_input = SimulatedUserInput(
            clock, UserBehaviorProfile.named(profile_name), rng=random.Random(5)
        )
        config = SimulationConfig(speed=1000, behavior_profile=profile_name)
        engine = make_engine(clock, user_input=user_input, simulation_config=config)

        summary = await asyncio.wait_for(
            WorkoutSimulationRunner(engine, user_input).run(create_simple_workout()),
            timeout=RUN_TIMEOUT,
        )

        assert summary.end_reason == EndReason.COMPLETED
        assert summary.is_simulated is True
        assert summary.simulation_config.behavior_profile == profile_name
        assert summary.ended_at > summary.started_at


@pytest.mark.unit
@pytest.mark.parametrize(
    "interval,expected",
    [
        ({"kind": "warmup", "seconds": 10}, ExerciseIntensity.LOW),
        ({"kind": "time", "seconds": 10}, ExerciseIntensity.HIGH),
        ({"kind": "reps", "reps": 5, "name": "Row"}, ExerciseIntensity.MODERATE),
        ({"kind": "distance", "meters": 400}, ExerciseIntensity.MODERATE),
        ({"kind": "rest", "seconds": 10}, ExerciseIntensity.REST),
    ],
)
def test_intensity_for_step(interval, expected):
    step = flatten_intervals(make_workout([interval]).intervals)[0]

    assert intensity_for_step(step) == expected
