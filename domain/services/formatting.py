"""Human-readable formatting helpers shared by flattening and completion output."""

from typing import Optional


def format_seconds(seconds: int) -> str:
    """Format a duration as '5m 30s', '5m' or '30s'."""
    minutes, secs = divmod(seconds, 60)
    if minutes > 0 and secs > 0:
        return f"{minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m"
    return f"{secs}s"


def format_distance(meters: int) -> str:
    """Format a distance as '400m' or '1.5 km'."""
    if meters >= 1000:
        return f"{meters / 1000.0:.1f} km"
    return f"{meters}m"


def with_target(base: str, target: Optional[str]) -> str:
    return f"{base} - {target}" if target else base
