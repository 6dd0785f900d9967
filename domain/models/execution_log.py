"""
Execution log models - what was actually done versus what was planned.

Serialized with snake_case keys, the shape the completions API stores.

Part of AMA-291: execution log capture
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class IntervalStatus(str, Enum):
    COMPLETED = "completed"
    MODIFIED = "modified"
    SKIPPED = "skipped"


class SetStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    FATIGUE = "fatigue"
    TIME_CONSTRAINT = "time_constraint"
    EQUIPMENT_UNAVAILABLE = "equipment_unavailable"
    PAIN = "pain"
    NAVIGATION = "navigation"  # Jumped past by skip-to-step
    OTHER = "other"


class SetExecution(BaseModel):
    """Execution data for a single set within an interval."""

    set_number: int
    status: SetStatus = SetStatus.COMPLETED
    reps_completed: Optional[int] = None
    weight: Optional[float] = None
    unit: Optional[str] = None  # "lbs" or "kg"
    duration_sec: Optional[int] = None


class IntervalExecution(BaseModel):
    """Execution data for a single visited step."""

    interval_index: int
    kind: Optional[str] = None
    name: Optional[str] = None
    status: IntervalStatus = IntervalStatus.COMPLETED
    planned_duration_sec: Optional[int] = None
    actual_duration_sec: Optional[int] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    skip_reason: Optional[SkipReason] = None
    sets: Optional[List[SetExecution]] = None


class ExecutionSummary(BaseModel):
    total_intervals: int = 0
    completed: int = 0
    skipped: int = 0
    modified: int = 0
    completion_percentage: float = 0.0


class ExecutionLog(BaseModel):
    intervals: List[IntervalExecution] = Field(default_factory=list)
    summary: ExecutionSummary = Field(default_factory=ExecutionSummary)

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for the completions API, omitting absent fields."""
        return self.model_dump(mode="json", exclude_none=True)
