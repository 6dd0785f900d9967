"""User input adapters."""

from infrastructure.input.real_input import RealUserInput
from infrastructure.input.simulated_input import SimulatedUserInput

__all__ = ["RealUserInput", "SimulatedUserInput"]
