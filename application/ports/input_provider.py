"""
User Input Provider Interface (Port).

Part of AMA-271: Workout Simulation Mode

Supplies the human decision points of a workout: tapping next, entering
completed reps, tapping ready after a manual rest. The engine's timer-driven
transitions never wait on this; it only decides *when* gesture-driven
transitions happen.
"""
from typing import Protocol


class UserInputProvider(Protocol):
    """Abstraction over user input for workout execution."""

    async def wait_for_advance(self) -> None:
        """Wait for the user to tap next/done."""
        ...

    async def wait_for_reps_entry(self, target: int) -> int:
        """
        Wait for the user to finish a set and log reps.

        Args:
            target: Target reps for the set

        Returns:
            Reps actually completed
        """
        ...

    async def wait_for_ready_after_rest(self) -> None:
        """Wait for the user to tap ready at the end of a manual rest."""
        ...

    async def wait_for_resume(self) -> None:
        """Wait for the user to resume after a pause."""
        ...

    def should_inject_pause(self) -> bool:
        """Whether the user pauses now (simulation may inject random pauses)."""
        ...

    def should_inject_skip(self) -> bool:
        """Whether the user skips the current step."""
        ...

    def cancel_pending(self) -> None:
        """Release every outstanding wait (called on session end/reset)."""
        ...
