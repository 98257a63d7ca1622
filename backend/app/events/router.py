"""
Event tracking routes
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.events.aggregator import update_jobs_views, update_search_appearances
from app.events.schemas import CountersBatch
from app.events.tracker import EventTracker, JobView, get_event_tracker

router = APIRouter(prefix="/api/v1", tags=["Events"])


@router.post("/boards/{board_id}/jobs/{job_id}/views", status_code=status.HTTP_204_NO_CONTENT)
def track_job_view(
    board_id: int,
    job_id: int,
    tracker: EventTracker = Depends(get_event_tracker),
):
    """Track a job view, counted on the next tracker flush"""
    if settings.EVENTS_TRACKING_ENABLED:
        tracker.track(JobView(job_id=job_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/events/jobs-views", status_code=status.HTTP_204_NO_CONTENT)
def merge_jobs_views(batch: CountersBatch, db: Session = Depends(get_db)):
    """Add a batch of job views to the daily counters"""
    update_jobs_views(db, batch.data, lock_key=batch.lock_key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/events/search-appearances", status_code=status.HTTP_204_NO_CONTENT)
def merge_search_appearances(batch: CountersBatch, db: Session = Depends(get_db)):
    """Add a batch of search appearances to the daily counters"""
    update_search_appearances(db, batch.data, lock_key=batch.lock_key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
