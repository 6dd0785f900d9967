"""
RealUserInput - waits for actual user interaction.

Each wait is an asyncio future that a UI event resolves exactly once.
Duplicate or late events are ignored; cancel_pending() cancels every
outstanding wait so a reset session never leaks a suspended task.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_ADVANCE = "advance"
_REPS = "reps"
_READY = "ready"
_RESUME = "resume"


class RealUserInput:
    """Production user input."""

    def __init__(self) -> None:
        self._waits: Dict[str, asyncio.Future] = {}

    # -------------------------------------------------------------------------
    # Waits (engine / runner side)
    # -------------------------------------------------------------------------

    async def wait_for_advance(self) -> None:
        await self._wait(_ADVANCE)

    async def wait_for_reps_entry(self, target: int) -> int:
        return await self._wait(_REPS)

    async def wait_for_ready_after_rest(self) -> None:
        await self._wait(_READY)

    async def wait_for_resume(self) -> None:
        await self._wait(_RESUME)

    def should_inject_pause(self) -> bool:
        # Real users control their own pauses
        return False

    def should_inject_skip(self) -> bool:
        return False

    def cancel_pending(self) -> None:
        waits, self._waits = self._waits, {}
        for future in waits.values():
            if not future.done():
                future.cancel()

    @property
    def pending(self) -> int:
        return sum(1 for f in self._waits.values() if not f.done())

    # -------------------------------------------------------------------------
    # UI events
    # -------------------------------------------------------------------------

    def user_did_tap_next(self) -> bool:
        return self._resolve(_ADVANCE, None)

    def user_did_complete_reps(self, count: int) -> bool:
        return self._resolve(_REPS, count)

    def user_did_tap_ready(self) -> bool:
        return self._resolve(_READY, None)

    def user_did_tap_resume(self) -> bool:
        return self._resolve(_RESUME, None)

    # -------------------------------------------------------------------------

    async def _wait(self, key: str) -> Any:
        previous = self._waits.get(key)
        if previous is not None and not previous.done():
            logger.warning(f"Replacing pending '{key}' wait")
            previous.cancel()
        future = asyncio.get_running_loop().create_future()
        self._waits[key] = future
        try:
            return await future
        finally:
            if self._waits.get(key) is future:
                del self._waits[key]

    def _resolve(self, key: str, value: Optional[Any]) -> bool:
        future = self._waits.get(key)
        if future is None or future.done():
            logger.debug(f"Ignoring '{key}' event with no pending wait")
            return False
        future.set_result(value)
        return True
