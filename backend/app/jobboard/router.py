"""
Job board routes
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.events.tracker import EventTracker, SearchAppearances, get_event_tracker
from app.jobboard.filters import JobsFilters, normalize_filters
from app.jobboard.schemas import FiltersOptions, JobBoardStats, JobDetail, JobsSearchOutput
from app.jobboard.service import job_search_service, page_job_ids
from app.jobboard.stats import get_stats

router = APIRouter(prefix="/api/v1", tags=["Job Board"])


def _search(db: Session, board_id: int, filters: JobsFilters, tracker: EventTracker) -> JobsSearchOutput:
    output = job_search_service.search_jobs(db, board_id, filters)
    if settings.EVENTS_TRACKING_ENABLED and output.jobs:
        tracker.track(SearchAppearances(job_ids=page_job_ids(output)))
    return output


@router.get("/boards/{board_id}/jobs/search", response_model=JobsSearchOutput)
def search_jobs(
    board_id: int,
    request: Request,
    db: Session = Depends(get_db),
    tracker: EventTracker = Depends(get_event_tracker),
):
    """Search the board's published jobs, filters come in the query string"""
    return _search(db, board_id, normalize_filters(request.query_params), tracker)


@router.post("/boards/{board_id}/jobs/search", response_model=JobsSearchOutput)
def search_jobs_json(
    board_id: int,
    filters: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
    tracker: EventTracker = Depends(get_event_tracker),
):
    """Search the board's published jobs, filters come as a JSON object"""
    return _search(db, board_id, normalize_filters(filters), tracker)


@router.get("/boards/{board_id}/jobs/{job_id}", response_model=JobDetail)
def get_job(
    board_id: int,
    job_id: int,
    db: Session = Depends(get_db),
):
    """Get a published job"""
    return job_search_service.get_job(db, board_id, job_id)


@router.get("/boards/{board_id}/stats", response_model=JobBoardStats)
def get_board_stats(
    board_id: int,
    db: Session = Depends(get_db),
):
    """Publication and views statistics"""
    return get_stats(db, board_id)


@router.get("/jobs/filters-options", response_model=FiltersOptions)
def get_filters_options(db: Session = Depends(get_db)):
    """Foundations and projects available to the search filters"""
    return job_search_service.get_filters_options(db)
