"""
Job status transitions
"""
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional, Tuple

from sqlalchemy.orm import Session
import structlog

from app.core.exceptions import InvalidTransitionError, NotFoundError
from app.models.job import Job, JobStatus

logger = structlog.get_logger()

# Allowed source statuses for each target status
TRANSITIONS: Dict[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.PENDING_APPROVAL: frozenset({JobStatus.DRAFT, JobStatus.REJECTED, JobStatus.ARCHIVED}),
    JobStatus.PUBLISHED: frozenset({JobStatus.DRAFT, JobStatus.PENDING_APPROVAL, JobStatus.ARCHIVED}),
    JobStatus.REJECTED: frozenset({JobStatus.PENDING_APPROVAL}),
    JobStatus.ARCHIVED: frozenset({JobStatus.PUBLISHED}),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _move(db: Session, job_id: int, target: JobStatus) -> Tuple[Job, JobStatus]:
    job = db.get(Job, job_id)
    if job is None:
        raise NotFoundError("Job", str(job_id))
    current = JobStatus(job.status)
    if current not in TRANSITIONS[target]:
        raise InvalidTransitionError(current.value, target.value)
    job.status = target.value
    return job, current


def _commit(db: Session, job: Job, event: str) -> Job:
    db.commit()
    db.refresh(job)
    logger.info(event, job_id=job.id, status=job.status)
    return job


def request_approval(db: Session, job_id: int) -> Job:
    """Submit a job for moderation"""
    job, _ = _move(db, job_id, JobStatus.PENDING_APPROVAL)
    return _commit(db, job, "job_approval_requested")


def publish_job(db: Session, job_id: int) -> Job:
    """
    Publish (or republish) a job. first_published_at is set the first time
    only, published_at on every publication.
    """
    job, previous = _move(db, job_id, JobStatus.PUBLISHED)
    now = _now()
    if job.first_published_at is None:
        job.first_published_at = now
    job.published_at = now
    job.archived_at = None
    if previous == JobStatus.PENDING_APPROVAL:
        job.reviewed_at = now
    return _commit(db, job, "job_published")


def reject_job(db: Session, job_id: int, review_notes: Optional[str] = None) -> Job:
    """Reject a job pending approval"""
    job, _ = _move(db, job_id, JobStatus.REJECTED)
    job.review_notes = review_notes
    job.reviewed_at = _now()
    return _commit(db, job, "job_rejected")


def archive_job(db: Session, job_id: int) -> Job:
    """Archive a published job, it leaves the search results"""
    job, _ = _move(db, job_id, JobStatus.ARCHIVED)
    job.archived_at = _now()
    return _commit(db, job, "job_archived")
