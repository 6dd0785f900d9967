"""
HTTP completion sink for the completions API.

Posts the finished session to `{base_url}/workouts/complete` using the
WorkoutCompletionRequest shape.
"""

import asyncio
import logging
from functools import partial
from typing import Any, Dict, Optional, Set

import httpx
from starlette.concurrency import run_in_threadpool

from application.ports.completion_sink import CompletionSubmissionError
from backend.workout_completions import build_completion_request
from domain.models.completion import CompletionSummary

logger = logging.getLogger(__name__)

COMPLETE_PATH = "/workouts/complete"


class HttpCompletionSink:
    """
    Submits completion summaries over HTTP.

    A caller-supplied ``client`` is used as-is (tests pass one built on
    httpx.MockTransport); otherwise a short-lived client is created per
    submission. The engine ends sessions on the event loop, so submissions
    made there are handed to the threadpool.
    """

    def __init__(
        self,
        base_url: str,
        auth_token: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        device_info: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the sink.

        Args:
            base_url: Base URL of the completions API (e.g., "http://mapper-api:8001")
            auth_token: Bearer token, if the API requires one
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client
            device_info: Metadata attached to every submission
        """
        self._base_url = base_url.rstrip("/")
        self._auth_token = auth_token
        self._timeout = timeout
        self._client = client
        self._device_info = device_info
        self._pending: Set["asyncio.Future[None]"] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def submit(self, summary: CompletionSummary) -> None:
        """
        Deliver the summary.

        Inside a running event loop the POST runs in the threadpool and this
        returns immediately; failures are then logged, not raised. Without a
        loop the POST runs inline.

        Raises:
            CompletionSubmissionError: On transport errors or non-2xx responses
                (inline submissions only)
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.post(summary)
            return

        task = asyncio.ensure_future(run_in_threadpool(self.post, summary))
        self._pending.add(task)
        task.add_done_callback(partial(self._on_posted, summary.workout_id))

    async def wait_pending(self) -> None:
        """Wait for background submissions started by submit()."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _on_posted(self, workout_id: str, task: "asyncio.Future[None]") -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning(f"Completion submission for workout {workout_id} was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Completion for workout {workout_id} was not submitted: {error}")

    def post(self, summary: CompletionSummary) -> None:
        """
        POST the summary, blocking until the API answers.

        Raises:
            CompletionSubmissionError: On transport errors or non-2xx responses
        """
        url = f"{self._base_url}{COMPLETE_PATH}"
        payload = build_completion_request(summary, self._device_info).model_dump(
            mode="json", exclude_none=True
        )
        headers = {"Content-Type": "application/json"}
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"

        try:
            if self._client is not None:
                response = self._client.post(url, json=payload, headers=headers)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Completions API unavailable: {e}")
            raise CompletionSubmissionError(f"Completions API is not available at {self._base_url}") from e

        if response.status_code >= 400:
            logger.error(f"Completions API error: {response.status_code} - {response.text}")
            raise CompletionSubmissionError(
                f"Completion for workout {summary.workout_id} rejected with {response.status_code}"
            )

        logger.info(f"Submitted completion for workout {summary.workout_id}")
