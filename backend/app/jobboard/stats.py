"""
Job board statistics
"""
from collections import Counter
from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func, select
from sqlalchemy.orm import Session
import structlog

from app.jobboard.predicates import published_day
from app.jobboard.schemas import JobBoardStats
from app.jobboard.service import read_snapshot
from app.models.board import Employer
from app.models.counters import JobView
from app.models.job import Job, Project, job_project

logger = structlog.get_logger()


def _epoch_ms(day: date) -> int:
    return int(datetime.combine(day, time.min, tzinfo=timezone.utc).timestamp() * 1000)


def _daily_views(db: Session, board_id: int, since: date) -> Dict[date, int]:
    rows = db.execute(
        select(JobView.day, func.sum(JobView.total))
        .join(Job, Job.id == JobView.job_id)
        .join(Employer, Employer.id == Job.employer_id)
        .where(Employer.job_board_id == board_id, JobView.day >= since)
        .group_by(JobView.day)
        .order_by(JobView.day)
    ).all()
    return {day: int(total) for day, total in rows}


def get_stats(db: Session, board_id: int, now: Optional[datetime] = None) -> JobBoardStats:
    """Publication and views statistics of a board"""
    now = now or datetime.now(timezone.utc)
    today = now.date()
    one_month_ago = now - relativedelta(months=1)
    two_years_ago = now - relativedelta(years=2)

    with read_snapshot(db):
        first_published = [
            published_day(value)
            for value in db.scalars(
                select(Job.first_published_at)
                .join(Employer, Employer.id == Job.employer_id)
                .where(Employer.job_board_id == board_id, Job.first_published_at.is_not(None))
            )
        ]

        foundation_jobs = db.execute(
            select(Project.foundation, func.count(func.distinct(Job.id)))
            .join(job_project, job_project.c.project_id == Project.id)
            .join(Job, Job.id == job_project.c.job_id)
            .join(Employer, Employer.id == Job.employer_id)
            .where(Employer.job_board_id == board_id, Job.first_published_at.is_not(None))
            .group_by(Project.foundation)
        ).all()

        daily_views = _daily_views(db, board_id, two_years_ago.date())

    per_month = Counter((day.year, day.month) for day in first_published)
    per_day = Counter(first_published)

    running_total: List[list] = []
    total = 0
    for day in sorted(per_day):
        total += per_day[day]
        running_total.append([_epoch_ms(day), total])

    monthly_views: Counter = Counter()
    for day, views in daily_views.items():
        monthly_views[day.replace(day=1)] += views

    stats = JobBoardStats(
        published_per_foundation=[
            [foundation, int(count)]
            for foundation, count in sorted(foundation_jobs, key=lambda row: (-row[1], row[0]))
        ],
        published_per_month=[
            [str(year), date(year, month, 1).strftime("%b"), count]
            for (year, month), count in sorted(per_month.items())
        ],
        published_running_total=running_total,
        views_daily=[
            [_epoch_ms(day), views]
            for day, views in sorted(daily_views.items())
            if one_month_ago.date() <= day <= today
        ],
        views_monthly=[[_epoch_ms(month), views] for month, views in sorted(monthly_views.items())],
        ts_now=int(now.timestamp() * 1000),
        ts_one_month_ago=int(one_month_ago.timestamp() * 1000),
        ts_two_years_ago=int(two_years_ago.timestamp() * 1000),
    )
    logger.debug("stats_computed", board_id=board_id, published=len(first_published))
    return stats
