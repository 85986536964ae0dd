"""Celery worker configuration.

Runs the passive booking status reconciliation for deployments that keep
the sweep out of the web processes (set STATUS_SWEEP_ENABLED=false there).
"""

from celery import Celery
from celery.schedules import crontab

from partybook.config import settings

# Create Celery app
celery_app = Celery(
    "partybook_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["partybook.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,  # 5 minutes max
    task_soft_time_limit=240,  # Soft limit at 4 minutes

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=2,

    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour

    # Retry settings
    task_default_retry_delay=60,  # 1 minute
    task_max_retries=3,

    # Beat schedule for periodic tasks
    beat_schedule={
        # Reconcile booking statuses every few minutes
        "sweep-booking-statuses": {
            "task": "partybook.tasks.sweep_booking_statuses",
            "schedule": crontab(minute=f"*/{settings.celery_sweep_minutes}"),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
