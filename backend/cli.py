import argparse
import asyncio
import json
import logging
import random
import sys

import sentry_sdk
from pydantic import ValidationError

from application.simulation import SimulationAborted
from backend.container import build_engine
from backend.settings import get_settings
from backend.workout_completions import build_completion_request, summarize_completion
from domain.models.behavior_profile import BEHAVIOR_PROFILE_NAMES
from domain.models.workout import Workout
from domain.services.interval_flattener import flatten_intervals

logger = logging.getLogger(__name__)


def _init_sentry(settings) -> None:
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.environment)


def _load_workout(path: str) -> Workout:
    with open(path, "r") as f:
        return Workout.model_validate(json.load(f))


async def _simulate(workout: Workout, settings, seed=None) -> dict:
    rng = random.Random(seed) if seed is not None else None
    session = build_engine(settings, rng=rng)
    summary = await session.runner().run(workout)
    await session.flush_completions()
    if summary is None:
        return {}
    return {
        "summary": summarize_completion(summary).model_dump(),
        "completion": build_completion_request(summary).model_dump(mode="json", exclude_none=True),
    }


def simulate(args) -> None:
    base = get_settings()
    settings = base.model_copy(
        update={
            "simulation_enabled": True,
            "simulation_speed": args.speed if args.speed is not None else base.simulation_speed,
            "simulation_profile": args.profile or base.simulation_profile,
        }
    )
    workout = _load_workout(args.input)
    result = asyncio.run(_simulate(workout, settings, seed=args.seed))
    print(json.dumps(result, indent=2))


def flatten(args) -> None:
    workout = _load_workout(args.input)
    steps = flatten_intervals(workout.intervals)
    print(json.dumps([step.model_dump(mode="json") for step in steps], indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run and inspect workouts with the execution engine")
    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate_parser = subparsers.add_parser("simulate", help="Run a simulated session and print the summary")
    simulate_parser.add_argument("input", help="Workout JSON file path")
    simulate_parser.add_argument("--speed", type=float, help="Clock speed multiplier (default: SIMULATION_SPEED)")
    simulate_parser.add_argument("--profile", choices=BEHAVIOR_PROFILE_NAMES, help="Simulated user behavior")
    simulate_parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    simulate_parser.set_defaults(handler=simulate)

    flatten_parser = subparsers.add_parser("flatten", help="Print the flattened steps of a workout")
    flatten_parser.add_argument("input", help="Workout JSON file path")
    flatten_parser.set_defaults(handler=flatten)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    _init_sentry(settings)

    try:
        args.handler(args)
    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: Invalid workout: {e}", file=sys.stderr)
        sys.exit(1)
    except SimulationAborted as e:
        print(f"Error: Simulation aborted: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
