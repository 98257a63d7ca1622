"""
Daily counters aggregation for job views and search appearances
"""
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from dateutil import parser as date_parser
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from app.core.database import BIGINT_MAX
from app.core.exceptions import DatabaseError
from app.core.locks import advisory_xact_lock
from app.models.counters import JobView, SearchAppearance
from app.models.job import Job, JobStatus

logger = structlog.get_logger()

# Lock keys used to serialize batches of each counter
LOCK_KEY_UPDATE_JOBS_VIEWS = 1
LOCK_KEY_UPDATE_SEARCH_APPEARANCES = 2

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _parse_day(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.isoparse(str(value)).date()


def _parse_count(value: Any) -> int:
    """Whole number within the BIGINT range; bools, fractions and huge values are malformed"""
    if isinstance(value, bool):
        raise TypeError(f"not a count: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"not a whole number: {value!r}")
    count = int(value)
    if abs(count) > BIGINT_MAX:
        raise OverflowError(f"out of range: {value!r}")
    return count


def parse_batch(data: Iterable[Any]) -> Dict[Tuple[int, date], int]:
    """
    Turn [job_id, day, total] triples into totals per (job_id, day).
    Malformed triples and non-positive totals are dropped.
    """
    batch: Dict[Tuple[int, date], int] = {}
    for item in data or []:
        try:
            job_id, day, total = item
            key = (_parse_count(job_id), _parse_day(day))
            total = _parse_count(total)
        except (TypeError, ValueError, OverflowError):
            logger.warning("counter_entry_dropped", entry=str(item))
            continue
        if total < 1:
            continue
        batch[key] = min(batch.get(key, 0) + total, BIGINT_MAX)
    return batch


def _merge_counters(db: Session, model, lock_key: int, data: Iterable[Any]) -> None:
    """
    Add the batch to the counters of model in one transaction, holding the
    advisory lock for lock_key. Jobs that are not published are skipped.
    """
    insert = _INSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        raise DatabaseError(
            "Counters require a database supporting upserts",
            details={"dialect": db.get_bind().dialect.name},
        )

    batch = parse_batch(data)
    try:
        with advisory_xact_lock(db, lock_key):
            rows = []
            if batch:
                job_ids = {job_id for job_id, _ in batch}
                published = set(
                    db.scalars(
                        select(Job.id).where(
                            Job.id.in_(job_ids),
                            Job.status == JobStatus.PUBLISHED.value,
                        )
                    )
                )
                rows = [
                    {"job_id": job_id, "day": day, "total": total}
                    for (job_id, day), total in sorted(batch.items())
                    if job_id in published
                ]
            if rows:
                stmt = insert(model).values(rows)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["job_id", "day"],
                    set_={"total": model.total + stmt.excluded.total},
                )
                db.execute(stmt)
            db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("counters_update_failed", table=model.__tablename__, error=str(e))
        raise

    logger.info(
        "counters_updated",
        table=model.__tablename__,
        rows=len(rows),
        dropped=len(batch) - len(rows),
    )


def update_jobs_views(db: Session, data: Iterable[Any], lock_key: Optional[int] = None) -> None:
    """Add a batch of [job_id, day, total] views to the daily counters"""
    _merge_counters(db, JobView, LOCK_KEY_UPDATE_JOBS_VIEWS if lock_key is None else lock_key, data)


def update_search_appearances(db: Session, data: Iterable[Any], lock_key: Optional[int] = None) -> None:
    """Add a batch of [job_id, day, total] search appearances to the daily counters"""
    _merge_counters(
        db,
        SearchAppearance,
        LOCK_KEY_UPDATE_SEARCH_APPEARANCES if lock_key is None else lock_key,
        data,
    )
