"""
Async client for submitting automation tasks and polling them to completion.

Mirrors what the web frontend does: log in once, submit a task, then
fetch GET /automation/tasks/{id} every couple of seconds until the task
is completed or failed.
"""
import asyncio
import logging
import time
from typing import Any, Optional

import httpx

from app.core.config import get_settings
from app.models.enums import TaskStatus

logger = logging.getLogger(__name__)


class TaskPollError(Exception):
    """Raised when the API rejects a poller request."""

    def __init__(self, status_code: int, detail: Any):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"API error {status_code}: {detail}")


class TaskPollTimeout(Exception):
    """Raised when a task is still pending after the poll timeout."""

    def __init__(self, task_id: int, timeout: float):
        self.task_id = task_id
        self.timeout = timeout
        super().__init__(f"Task {task_id} did not finish within {timeout:.0f}s")


class TaskPoller:
    """
    Client for the automation endpoints.

    Usage:
        async with TaskPoller("http://localhost:8000") as poller:
            await poller.login("admin", "admin")
            task = await poller.submit({"name": "find_account", ...})
            done = await poller.wait_for_task(task["id"])

    Args:
        base_url: API base URL including any api prefix
        transport: Optional httpx transport, used by tests
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
        )
        self.token: Optional[str] = None

    async def __aenter__(self) -> "TaskPoller":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    @property
    def _auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        response = await self._http.request(
            method, path, headers=self._auth_headers, **kwargs
        )
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            raise TaskPollError(response.status_code, detail)
        return response.json()

    async def login(self, username: str, password: str) -> str:
        """Obtain and keep a bearer token."""
        data = await self._call(
            "POST", "/auth/token", json={"username": username, "password": password}
        )
        self.token = data["access_token"]
        return self.token

    async def get_settings(self) -> dict[str, Any]:
        """Return the user's panel settings."""
        return await self._call("GET", "/automation/settings")

    async def submit(self, task: dict[str, Any]) -> dict[str, Any]:
        """
        Submit a task.

        When the task has no target_website, the panel URL from the
        user's settings is filled in, as the frontend does.
        """
        body = dict(task)
        if not body.get("target_website"):
            user_settings = await self.get_settings()
            body["target_website"] = user_settings.get("website_url", "")

        return await self._call("POST", "/automation/tasks", json=body)

    async def get_task(self, task_id: int) -> dict[str, Any]:
        return await self._call("GET", f"/automation/tasks/{task_id}")

    async def wait_for_task(
        self,
        task_id: int,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """
        Poll a task until it is completed or failed.

        Args:
            task_id: Task to poll
            interval: Seconds between polls (default 2)
            timeout: Give up after this many seconds (default 300)

        Returns:
            The final task detail

        Raises:
            TaskPollTimeout: If the task is still pending at the deadline
        """
        settings = get_settings()
        interval = settings.task_poll_interval_seconds if interval is None else interval
        timeout = settings.task_poll_timeout_seconds if timeout is None else timeout
        deadline = time.monotonic() + timeout

        while True:
            task = await self.get_task(task_id)
            if TaskStatus(task["status"]).is_terminal:
                logger.info(f"Task {task_id} finished: {task['status']}")
                return task

            if time.monotonic() + interval > deadline:
                raise TaskPollTimeout(task_id, timeout)

            await asyncio.sleep(interval)

    async def run(self, task: dict[str, Any], **poll_kwargs) -> dict[str, Any]:
        """Submit a task and wait for its outcome."""
        created = await self.submit(task)
        logger.info(f"Submitted task {created['id']} ({created['name']})")
        return await self.wait_for_task(created["id"], **poll_kwargs)
