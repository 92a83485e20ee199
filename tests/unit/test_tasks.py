"""Tests for app.services.tasks -- detached execution and the Celery entry point."""
from unittest.mock import patch

import pytest

from app.models import AutomationTask, TaskStatus
from app.services.tasks import CRASH_MESSAGE, execute_detached, run_automation_task


@pytest.fixture
def detached_sessions(db_session):
    """Point execute_detached at the in-memory test database."""
    with patch("app.services.tasks.SyncSessionLocal", db_session.info["factory"]):
        yield db_session


def reload_task(session, task_id) -> AutomationTask:
    session.expire_all()
    return session.get(AutomationTask, task_id)


class TestExecuteDetached:

    def test_runs_task_to_completion(self, detached_sessions, make_user_row, make_task_row):
        user = make_user_row()
        task = make_task_row(user.id, name="find_account")

        result = execute_detached(task.id, {"username": "alice", "password": "", "package": 0})

        assert result["success"] is True
        assert reload_task(detached_sessions, task.id).status == TaskStatus.COMPLETED.value

    def test_crash_marks_task_failed(self, detached_sessions, make_user_row, make_task_row):
        user = make_user_row()
        task = make_task_row(user.id)

        with patch("app.services.tasks.execute_task", side_effect=RuntimeError("boom")):
            result = execute_detached(task.id, {})

        assert result == {"success": False, "error": CRASH_MESSAGE}
        stored = reload_task(detached_sessions, task.id)
        assert stored.status == TaskStatus.FAILED.value
        assert stored.result == result

    def test_crash_after_completion_keeps_outcome(self, detached_sessions, make_user_row, make_task_row):
        user = make_user_row()
        task = make_task_row(user.id, status=TaskStatus.COMPLETED.value)

        with patch("app.services.tasks.execute_task", side_effect=RuntimeError("boom")):
            execute_detached(task.id, {})

        assert reload_task(detached_sessions, task.id).status == TaskStatus.COMPLETED.value


class TestCeleryTask:

    def test_registered_on_automation_queue(self):
        from app.core.celery_app import celery_app

        assert run_automation_task.name in celery_app.tasks
        route = celery_app.conf.task_routes[run_automation_task.name]
        assert route == {"queue": "automation"}

    def test_delegates_to_execute_detached(self):
        with patch("app.services.tasks.execute_detached", return_value={"success": True, "data": []}) as run:
            result = run_automation_task.apply(kwargs={"task_id": 7, "payload": {"username": "a"}}).get()

        run.assert_called_once_with(7, {"username": "a"})
        assert result == {"success": True, "data": []}

    def test_acknowledged_before_execution(self):
        from app.core.celery_app import celery_app

        assert run_automation_task.acks_late is False
        assert run_automation_task.max_retries == 0
        assert not celery_app.conf.task_reject_on_worker_lost

    def test_only_automation_queue(self):
        from app.core.celery_app import celery_app

        assert set(celery_app.conf.task_queues) == {"automation"}
        assert set(celery_app.conf.task_routes) == {run_automation_task.name}
