"""
Automation task execution.

Runs one stored task against the owner's panel and writes the outcome
back to the row. Execution is synchronous; callers decide where it runs
(a Celery worker or the API threadpool, see app.services.tasks).
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.models import AutomationTask, TaskName, TaskStatus, UserSettings
from app.services.panel_client import (
    CreateAccountRequest,
    ExtendPackageRequest,
    PanelAPIClient,
    PanelAPIError,
    is_html_response,
)

logger = logging.getLogger(__name__)

HTML_ERROR_MESSAGE = (
    "Connection error: The external service URL appears to be incorrect "
    "or not responding properly."
)
NO_ACCOUNTS_MESSAGE = "No accounts found with the provided username"


def success_result(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def failure_result(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


def sanitize_error_message(message: str) -> str:
    """Replace error text that embeds an HTML page with a readable message."""
    if is_html_response(message):
        return HTML_ERROR_MESSAGE
    return message


def execute_task(
    session: Session,
    task_id: int,
    payload: dict[str, Any],
    client: Optional[PanelAPIClient] = None,
) -> Optional[dict[str, Any]]:
    """
    Execute a pending automation task and persist its result.

    Args:
        session: Sync database session
        task_id: AutomationTask primary key
        payload: Request fields not stored on the row
            (username, password, package)
        client: Panel client override; built from the owner's settings
            when omitted

    Returns:
        The result envelope written to the row, the existing result when
        the task had already finished, or None when the task is missing.
    """
    task = session.get(AutomationTask, task_id)
    if task is None:
        logger.error(f"Task {task_id} not found, nothing to execute")
        return None

    if not task.is_pending:
        logger.warning(f"Task {task_id} already {task.status}, skipping execution")
        return task.result

    logger.info(f"Executing task {task_id} ({task.name})")

    user_settings = session.execute(
        select(UserSettings).where(UserSettings.user_id == task.user_id)
    ).scalar_one_or_none()

    if user_settings is None:
        result = failure_result("Settings not found")
    elif client is not None:
        result = run_operation(task.name, payload, client)
    else:
        with PanelAPIClient.from_settings(user_settings) as own_client:
            result = run_operation(task.name, payload, own_client)

    status = TaskStatus.COMPLETED if result["success"] else TaskStatus.FAILED
    write_outcome(session, task_id, status, result)

    logger.info(f"Task {task_id} finished with status {status.value}")
    return result


def run_operation(
    name: str,
    payload: dict[str, Any],
    client: PanelAPIClient,
) -> dict[str, Any]:
    """Call the panel for one task and build its result envelope."""
    rid = str(uuid4())
    logger.info(f"Running {name} (rid={rid}, simulation={client.is_simulation_mode})")

    try:
        operation = TaskName(name)
    except ValueError:
        return failure_result(f"Unsupported task: {name}")

    try:
        if operation is TaskName.CREATE_ACCOUNT:
            return _create_account(client, payload, rid)
        if operation is TaskName.FIND_ACCOUNT:
            return _find_account(client, payload)
        return _extend_package(client, payload, rid)
    except PanelAPIError as e:
        logger.error(f"{name} failed (rid={rid}): {e}")
        return failure_result(sanitize_error_message(str(e)))


def _create_account(client: PanelAPIClient, payload: dict[str, Any], rid: str) -> dict[str, Any]:
    username = payload.get("username") or ""
    password = payload.get("password") or ""

    response = client.create_account(
        CreateAccountRequest(
            username=username or None,
            password=password or None,
            package=payload.get("package", 0),
            rid=rid,
        )
    )
    return success_result({
        "line_id": response.line_id,
        "username": username,
        "password": password,
        "expire_at": response.expire_at.isoformat(),
        "transaction_amount": response.transaction_amount,
        "rid": response.rid,
    })


def _find_account(client: PanelAPIClient, payload: dict[str, Any]) -> dict[str, Any]:
    lines = client.find_account(payload.get("username") or "")
    return success_result([line.model_dump(mode="json") for line in lines])


def _extend_package(client: PanelAPIClient, payload: dict[str, Any], rid: str) -> dict[str, Any]:
    username = payload.get("username") or ""

    lines = client.find_account(username)
    if not lines:
        logger.warning(f"No accounts found for username '{username}'")
        return failure_result(NO_ACCOUNTS_MESSAGE)

    # The panel may return several matches; the first one is renewed
    line = lines[0]
    response = client.extend_package(
        line.line_id,
        ExtendPackageRequest(package=payload.get("package", 0), rid=rid),
    )
    return success_result({
        "line_id": response.line_id,
        "username": line.username,
        "password": line.password,
        "expire_at": response.expire_at.isoformat(),
        "transaction_amount": response.transaction_amount,
        "rid": response.rid,
    })


def write_outcome(
    session: Session,
    task_id: int,
    status: TaskStatus,
    result: dict[str, Any],
) -> bool:
    """
    Move a pending task to a terminal status and commit.

    The update only matches rows still pending, so a task is never
    finished twice.

    Returns:
        True if the row was updated
    """
    now = datetime.now(timezone.utc)
    stmt = (
        update(AutomationTask)
        .where(
            AutomationTask.id == task_id,
            AutomationTask.status == TaskStatus.PENDING.value,
        )
        .values(
            status=status.value,
            result=result,
            completed_at=now,
            updated_at=now,
        )
    )
    updated = session.execute(stmt).rowcount > 0
    session.commit()  # Commit immediately so pollers can see the update

    if not updated:
        logger.warning(f"Task {task_id} was no longer pending; outcome discarded")
    return updated
