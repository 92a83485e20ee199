"""
Automation API endpoints.

Tasks are created synchronously and executed detached; clients poll
GET /automation/tasks/{task_id} until the status is terminal.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.dependencies import CurrentUser
from app.db.database import get_async_session
from app.models import AutomationTask, TaskStatus, UserSettings
from app.schemas.automation import (
    TaskCreate,
    TaskResponse,
    TaskDetailResponse,
    SettingsUpdate,
    SettingsResponse,
)
from app.schemas.base import MessageResponse
from app.services.automation import failure_result
from app.services.tasks import execute_detached, run_automation_task

router = APIRouter()
logger = logging.getLogger(__name__)

PANEL_URL_MISSING = (
    "Panel URL is not configured. Please go to Settings and configure "
    "your Panel URL first."
)
DISPATCH_FAILED = "Task queue is unavailable. Please try again later."


async def _get_user_settings(session: AsyncSession, user_id: int) -> UserSettings | None:
    result = await session.execute(
        select(UserSettings).where(UserSettings.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def _fail_undispatched(session: AsyncSession, task_id: int, message: str) -> None:
    """Mark a task that never reached a worker as failed."""
    now = datetime.now(timezone.utc)
    await session.execute(
        update(AutomationTask)
        .where(
            AutomationTask.id == task_id,
            AutomationTask.status == TaskStatus.PENDING.value,
        )
        .values(
            status=TaskStatus.FAILED.value,
            result=failure_result(message),
            completed_at=now,
            updated_at=now,
        )
    )
    await session.commit()


@router.post("/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    request: TaskCreate,
    current_user: CurrentUser,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_async_session),
):
    """
    Submit a panel operation.

    ## Process Flow

    1. Validates the request and the user's panel settings
    2. Creates an AutomationTask row in status `pending`
    3. Dispatches the detached run (Celery worker or background thread)
    4. Returns the task for status polling

    Use `GET /automation/tasks/{task_id}` until status is `completed` or `failed`.
    """
    if not request.target_website.strip():
        raise HTTPException(status_code=400, detail=PANEL_URL_MISSING)

    user_settings = await _get_user_settings(session, current_user.id)
    if not user_settings:
        raise HTTPException(status_code=404, detail="Settings not found")

    task = AutomationTask(
        user_id=current_user.id,
        name=request.name,
        target_website=request.target_website.strip(),
        status=TaskStatus.PENDING.value,
    )
    session.add(task)

    # The row must be visible to the worker before it is dispatched
    await session.commit()
    await session.refresh(task)

    payload = request.execution_payload()
    settings = get_settings()
    if settings.task_executor == "celery":
        try:
            celery_task = run_automation_task.delay(task_id=task.id, payload=payload)
        except Exception:
            logger.exception(f"Could not queue task {task.id}, marking it failed")
            await _fail_undispatched(session, task.id, DISPATCH_FAILED)
            raise HTTPException(status_code=503, detail=DISPATCH_FAILED)
        logger.info(f"Task {task.id} ({task.name}) queued as celery task {celery_task.id}")
    else:
        background_tasks.add_task(execute_detached, task.id, payload)
        logger.info(f"Task {task.id} ({task.name}) scheduled in background")

    return TaskResponse.model_validate(task)


@router.get("/tasks", response_model=list[TaskResponse])
async def list_tasks(
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_async_session),
):
    """List the current user's tasks, newest first."""
    result = await session.execute(
        select(AutomationTask)
        .where(AutomationTask.user_id == current_user.id)
        .order_by(AutomationTask.created_at.desc(), AutomationTask.id.desc())
    )
    return [TaskResponse.model_validate(t) for t in result.scalars().all()]


@router.get("/tasks/{task_id}", response_model=TaskDetailResponse)
async def get_task(
    task_id: int,
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_async_session),
):
    """
    Get a task's status and result.

    ## Status Values

    - **pending**: the panel call has not finished yet
    - **completed**: result is `{"success": true, "data": ...}`
    - **failed**: result is `{"success": false, "error": "..."}`
    """
    result = await session.execute(
        select(AutomationTask).where(
            AutomationTask.id == task_id,
            AutomationTask.user_id == current_user.id,
        )
    )
    task = result.scalar_one_or_none()

    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    return TaskDetailResponse.model_validate(task)


@router.get("/settings", response_model=SettingsResponse)
async def get_settings_for_user(
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_async_session),
):
    """Return the user's panel settings (empty strings if never saved)."""
    user_settings = await _get_user_settings(session, current_user.id)
    if not user_settings:
        return SettingsResponse()
    return SettingsResponse.model_validate(user_settings)


@router.put("/settings", response_model=MessageResponse)
async def update_settings(
    data: SettingsUpdate,
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_async_session),
):
    """Create or replace the user's panel settings."""
    user_settings = await _get_user_settings(session, current_user.id)

    if user_settings is None:
        session.add(UserSettings(user_id=current_user.id, **data.model_dump()))
    else:
        for field, value in data.model_dump().items():
            setattr(user_settings, field, value)

    await session.flush()

    logger.info(f"Panel settings saved for user '{current_user.username}'")
    return MessageResponse(message="Settings updated successfully")
