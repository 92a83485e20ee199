"""
Celery application configuration for Account Editor.

Celery runs automation tasks outside the API process so task creation
returns immediately while the panel call is in flight.

Usage:
    # Start worker (from project root):
    celery -A app.core.celery_app worker -Q automation --loglevel=info

    # Start Flower monitoring (optional):
    celery -A app.core.celery_app flower --port=5555
"""
from celery import Celery

from app.core.config import settings

# Create Celery application
celery_app = Celery(
    "account_editor",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.services.tasks"],  # Auto-discover tasks
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution
    # Messages are acknowledged on receipt, so each task executes at most once
    task_acks_late=False,

    # Result backend
    result_expires=86400,  # Results expire after 24 hours

    # Worker settings
    worker_prefetch_multiplier=1,

    # Task routing
    task_routes={
        "app.services.tasks.run_automation_task": {"queue": "automation"},
    },

    # A panel call is bounded by the HTTP timeout; these are a backstop
    task_soft_time_limit=int(settings.panel_request_timeout * 4),
    task_time_limit=int(settings.panel_request_timeout * 4) + 30,

    # Tasks run once; failures are recorded on the row instead
    task_max_retries=0,
)

# Define task queues
celery_app.conf.task_queues = {
    "automation": {
        "exchange": "automation",
        "routing_key": "automation",
    },
}
