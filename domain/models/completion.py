"""
Completion summary emitted when a session ends.

Health aggregates are contributed by a HealthDataProvider; the engine never
computes them itself, so every health field is optional.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from domain.models.engine_state import EndReason
from domain.models.execution_log import ExecutionLog


class HealthMetrics(BaseModel):
    """Health metrics captured during the workout."""

    avg_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    min_heart_rate: Optional[int] = None
    active_calories: Optional[int] = None
    total_calories: Optional[int] = None


class SimulationConfig(BaseModel):
    """Simulation parameters when a workout is run in simulation mode."""

    speed: Optional[float] = None  # e.g. 10.0 for 10x speed
    behavior_profile: Optional[str] = None  # "efficient", "casual", "distracted"
    hr_profile: Optional[str] = None


class CompletionSummary(BaseModel):
    workout_id: str
    workout_name: str
    started_at: datetime
    ended_at: datetime
    elapsed_seconds: int = Field(..., ge=0)
    completed_steps: int = Field(..., ge=0)
    total_steps: int = Field(..., ge=0)
    end_reason: EndReason
    health: HealthMetrics = Field(default_factory=HealthMetrics)
    is_simulated: bool = False
    simulation_config: Optional[SimulationConfig] = None
    execution_log: Optional[ExecutionLog] = None
    workout_structure: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def completion_ratio(self) -> float:
        if self.total_steps == 0:
            return 0.0
        return min(1.0, self.completed_steps / self.total_steps)
