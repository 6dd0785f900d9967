"""
Application Layer for the workout execution engine.

Part of AMA-271: Workout Simulation Mode

This package contains:
- ports/: Abstract collaborator interfaces (what the engine needs)
- engine/: The WorkoutEngine state machine and execution log builder
- remote/: Companion command channel and state mirror
- simulation/: End-to-end simulation runner
"""
