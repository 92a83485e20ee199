"""
Detached execution of automation tasks.

`execute_detached` is the unit of work: it opens its own sync session,
runs the task and guarantees the row ends in a terminal status even if
execution crashes. It runs either inside a Celery worker
(`run_automation_task`) or in the API threadpool via FastAPI
BackgroundTasks, depending on settings.task_executor.
"""
import logging
from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.celery_app import celery_app
from app.db.database import engine_options
from app.models import TaskStatus
from app.services.automation import execute_task, failure_result, write_outcome

logger = logging.getLogger(__name__)

CRASH_MESSAGE = "Internal server error: task execution crashed"

# Sync engine for workers (Celery tasks and threadpool runs are not async)
sync_engine = create_engine(
    settings.database_url_sync,
    **engine_options(settings.database_url_sync),
)

SyncSessionLocal = sessionmaker(bind=sync_engine, autoflush=False, expire_on_commit=False)


def execute_detached(task_id: int, payload: dict[str, Any]) -> Optional[dict[str, Any]]:
    """
    Run one automation task to completion in its own session.

    Never raises: unexpected errors are logged and the task is marked
    failed so pollers always see a terminal status.
    """
    with SyncSessionLocal() as session:
        try:
            return execute_task(session, task_id, payload)
        except Exception:
            logger.exception(f"Task {task_id} crashed during execution")
            session.rollback()

        result = failure_result(CRASH_MESSAGE)
        try:
            write_outcome(session, task_id, TaskStatus.FAILED, result)
        except Exception:
            logger.exception(f"Could not record failure for task {task_id}")
            session.rollback()
        return result


@celery_app.task(
    bind=True,
    name="app.services.tasks.run_automation_task",
    queue="automation",
    max_retries=0,
    acks_late=False,
)
def run_automation_task(self, task_id: int, payload: dict[str, Any]) -> Optional[dict[str, Any]]:
    """
    Celery entry point for a submitted automation task.

    Args:
        task_id: AutomationTask primary key
        payload: username, password and package from the request

    Returns:
        The result envelope stored on the task
    """
    logger.info(f"Worker picked up task {task_id} (celery id {self.request.id})")
    return execute_detached(task_id, payload)
