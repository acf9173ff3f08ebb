"""Celery application instance.

Start the worker::

    celery -A kasir.app.workers.celery_app worker --loglevel=info
"""

from __future__ import annotations

from celery import Celery

from kasir.app.core.config import settings

celery = Celery(
    "kasir",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone=settings.STORE_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
)

# Register workers/tasks/receipts.py with the worker
celery.autodiscover_tasks(["kasir.app.workers.tasks"], related_name="receipts")
