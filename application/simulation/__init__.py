"""
Workout simulation mode.

Part of AMA-271: Workout Simulation Mode
"""

from application.simulation.runner import (
    SimulationAborted,
    WorkoutSimulationRunner,
    intensity_for_step,
)

__all__ = [
    "SimulationAborted",
    "WorkoutSimulationRunner",
    "intensity_for_step",
]
