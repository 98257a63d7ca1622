"""
Celery application merging tracked events into the daily counters
"""
from celery import Celery
from app.core.config import settings

EVENTS_QUEUE = "events"

celery_app = Celery(
    "jobboard",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["app.tasks.event_tasks"],
)

# Counter merges are short and nobody waits for their result
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_routes={"app.tasks.event_tasks.*": {"queue": EVENTS_QUEUE}},
    task_default_queue=EVENTS_QUEUE,
    task_time_limit=60,
    task_soft_time_limit=45,
    task_ignore_result=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    # Batches of one counter serialize on the advisory lock anyway
    worker_prefetch_multiplier=1,
)
