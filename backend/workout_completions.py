"""
Workout completion payloads for the completions API (AMA-189).

Maps a CompletionSummary produced by the engine onto the request body the
`/workouts/complete` endpoint accepts, with health metrics, the original
interval structure, the execution log (AMA-290) and simulation fields (AMA-273).
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from pydantic import BaseModel
import logging

from domain.models.completion import CompletionSummary, HealthMetrics, SimulationConfig

logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic Models
# ============================================================================

class WorkoutCompletionRequest(BaseModel):
    """Request body sent when a workout completes."""
    workout_id: Optional[str] = None
    started_at: str  # ISO format
    ended_at: str    # ISO format
    health_metrics: HealthMetrics
    source: str = "amakaflow_engine"  # 'amakaflow_engine', 'simulation'
    end_reason: Optional[str] = None  # 'completed', 'userEnded', 'error'
    device_info: Optional[Dict[str, Any]] = None
    workout_structure: Optional[List[Dict[str, Any]]] = None  # Original workout intervals (AMA-240)
    # Execution log (AMA-290) - captures actual execution vs planned
    execution_log: Optional[Dict[str, Any]] = None
    # Simulation fields (AMA-273)
    is_simulated: bool = False
    simulation_config: Optional[SimulationConfig] = None


class WorkoutCompletionSummary(BaseModel):
    """Human-readable completion summary (CLI output, logs)."""
    workout_name: str
    duration_formatted: str
    steps: str
    end_reason: str
    avg_heart_rate: Optional[int] = None
    calories: Optional[int] = None


# ============================================================================
# Helper Functions
# ============================================================================

def format_duration(seconds: int) -> str:
    """Format duration in seconds to MM:SS or HH:MM:SS."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def to_iso(value: datetime) -> str:
    """ISO-8601 in UTC with a 'Z' suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def calculate_duration_seconds(started_at: str, ended_at: str) -> int:
    """Calculate duration in seconds between two ISO timestamps."""
    try:
        start = datetime.fromisoformat(started_at.replace('Z', '+00:00'))
        end = datetime.fromisoformat(ended_at.replace('Z', '+00:00'))
        return int((end - start).total_seconds())
    except ValueError as e:
        logger.error(f"Error calculating duration: {e}")
        return 0


def build_completion_request(
    summary: CompletionSummary,
    device_info: Optional[Dict[str, Any]] = None,
) -> WorkoutCompletionRequest:
    """
    Build the completions API request for a finished session.

    Args:
        summary: Summary emitted by the engine on end()
        device_info: Optional device metadata

    Returns:
        WorkoutCompletionRequest ready for model_dump(mode="json")
    """
    execution_log = None
    if summary.execution_log is not None:
        execution_log = summary.execution_log.to_payload()

    return WorkoutCompletionRequest(
        workout_id=summary.workout_id or None,
        started_at=to_iso(summary.started_at),
        ended_at=to_iso(summary.ended_at),
        health_metrics=summary.health,
        source="simulation" if summary.is_simulated else "amakaflow_engine",
        end_reason=summary.end_reason.value,
        device_info=device_info,
        workout_structure=summary.workout_structure or None,
        execution_log=execution_log,
        is_simulated=summary.is_simulated,
        simulation_config=summary.simulation_config,
    )


def summarize_completion(summary: CompletionSummary) -> WorkoutCompletionSummary:
    return WorkoutCompletionSummary(
        workout_name=summary.workout_name,
        duration_formatted=format_duration(summary.elapsed_seconds),
        steps=f"{summary.completed_steps}/{summary.total_steps}",
        end_reason=summary.end_reason.value,
        avg_heart_rate=summary.health.avg_heart_rate,
        calories=summary.health.active_calories,
    )
