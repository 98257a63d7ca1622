"""
Counter merge tasks
"""
from celery import Task
from sqlalchemy.orm import Session
from app.core.celery_app import celery_app
from app.core.database import SessionLocal
from app.events.aggregator import update_jobs_views, update_search_appearances
import structlog

logger = structlog.get_logger()


@celery_app.task(bind=True, max_retries=3)
def update_jobs_views_task(self: Task, data: list):
    """Merge a batch of job views into the daily counters"""
    db: Session = SessionLocal()
    try:
        update_jobs_views(db, data)
    except Exception as e:
        logger.exception("jobs_views_task_failed", entries=len(data), error=str(e))
        raise self.retry(exc=e, countdown=60)
    finally:
        db.close()


@celery_app.task(bind=True, max_retries=3)
def update_search_appearances_task(self: Task, data: list):
    """Merge a batch of search appearances into the daily counters"""
    db: Session = SessionLocal()
    try:
        update_search_appearances(db, data)
    except Exception as e:
        logger.exception("search_appearances_task_failed", entries=len(data), error=str(e))
        raise self.retry(exc=e, countdown=60)
    finally:
        db.close()
