"""
Job board service - search and read access to published jobs
"""
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload
import structlog

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.redis_client import cache_key, delete_cache, get_cache, set_cache
from app.jobboard.filters import JobsFilters
from app.jobboard.predicates import Point, compile_predicates
from app.jobboard.schemas import (
    EmployerDetail,
    EmployerSummary,
    FiltersOptions,
    FoundationOption,
    JobDetail,
    JobsSearchOutput,
    JobSummary,
    LocationSummary,
    MemberSummary,
    ProjectSummary,
)
from app.models.board import Employer, Foundation
from app.models.job import Job, JobStatus, Project
from app.models.location import Location

logger = structlog.get_logger()

FILTERS_OPTIONS_CACHE_KEY = cache_key("filters_options")


@contextmanager
def read_snapshot(db: Session):
    """
    Run the block inside a single transaction so every query in it sees the
    same data. Joins the caller's transaction when one is already open.
    """
    if db.in_transaction():
        yield
        return
    with db.begin():
        if db.get_bind().dialect.name == "postgresql":
            db.connection(execution_options={"isolation_level": "REPEATABLE READ"})
        yield


def _utc_naive(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.min
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def recency_key(job: Job):
    """Newest first; id breaks ties so pages are stable"""
    return (_utc_naive(job.published_at), job.id)


def _member_summary(employer: Employer) -> Optional[MemberSummary]:
    member = employer.member
    if member is None:
        return None
    return MemberSummary(
        member_id=member.id,
        name=member.name,
        level=member.level,
        logo_url=member.logo_url,
        foundation=member.foundation,
    )


def _location_summary(location: Optional[Location]) -> Optional[LocationSummary]:
    if location is None:
        return None
    return LocationSummary(
        location_id=location.id,
        city=location.city,
        country=location.country,
        state=location.state,
    )


def _project_summary(project: Project) -> ProjectSummary:
    return ProjectSummary(
        project_id=project.id,
        name=project.name,
        maturity=project.maturity,
        logo_url=project.logo_url,
        foundation=project.foundation,
    )


def _job_fields(job: Job) -> dict:
    return dict(
        job_id=job.id,
        title=job.title,
        kind=job.kind,
        workplace=job.workplace,
        seniority=job.seniority,
        published_at=job.published_at,
        updated_at=job.updated_at,
        open_source=job.open_source,
        upstream_commitment=job.upstream_commitment,
        salary=job.salary,
        salary_currency=job.salary_currency,
        salary_min=job.salary_min,
        salary_max=job.salary_max,
        salary_period=job.salary_period,
        skills=job.skills,
        location=_location_summary(job.location),
        projects=[_project_summary(p) for p in job.projects] or None,
    )


def to_job_summary(job: Job) -> JobSummary:
    employer = job.employer
    return JobSummary(
        employer=EmployerSummary(
            employer_id=employer.id,
            company=employer.company,
            logo_id=employer.logo_id,
            website_url=employer.website_url,
            member=_member_summary(employer),
        ),
        **_job_fields(job),
    )


def to_job_detail(job: Job) -> JobDetail:
    employer = job.employer
    return JobDetail(
        description=job.description,
        benefits=job.benefits,
        employer=EmployerDetail(
            employer_id=employer.id,
            company=employer.company,
            description=employer.description,
            logo_id=employer.logo_id,
            website_url=employer.website_url,
            member=_member_summary(employer),
        ),
        **_job_fields(job),
    )


class JobSearchService:
    """Runs job searches and reads published jobs of a board"""

    def _jobs_query(self, db: Session):
        return (
            db.query(Job)
            .join(Job.employer)
            .options(
                joinedload(Job.employer).joinedload(Employer.member),
                joinedload(Job.location),
                selectinload(Job.projects),
            )
        )

    def _location_point(self, db: Session, location_id: int) -> Optional[Point]:
        location = db.get(Location, location_id)
        if location is None or location.latitude is None or location.longitude is None:
            return None
        return (location.latitude, location.longitude)

    def search_jobs(self, db: Session, board_id: int, filters: JobsFilters) -> JobsSearchOutput:
        """
        Search the published jobs of a board.
        The page and the total come from the same filtered set, read in one
        transaction, so they always agree.
        """
        with read_snapshot(db):
            origin = None
            if filters.location_id is not None and filters.max_distance is not None:
                origin = self._location_point(db, filters.location_id)
            conjunction = compile_predicates(board_id, filters, origin)

            candidates = self._jobs_query(db).filter(*conjunction.clauses()).all()
            matching = [job for job in candidates if conjunction.matches(job)]
            matching.sort(key=recency_key, reverse=True)

            total = len(matching)
            page = matching[filters.offset:filters.offset + filters.limit]
            jobs = [to_job_summary(job) for job in page]

        logger.info(
            "jobs_searched",
            board_id=board_id,
            candidates=len(candidates),
            total=total,
            returned=len(jobs),
            offset=filters.offset,
        )
        return JobsSearchOutput(jobs=jobs, total=total)

    def get_job(self, db: Session, board_id: int, job_id: int) -> JobDetail:
        """Get a published job of the board"""
        with read_snapshot(db):
            job = (
                self._jobs_query(db)
                .filter(
                    Job.id == job_id,
                    Job.status == JobStatus.PUBLISHED.value,
                    Employer.job_board_id == board_id,
                )
                .first()
            )
            if job is None:
                raise NotFoundError("Job", str(job_id))
            return to_job_detail(job)

    def get_filters_options(self, db: Session) -> FiltersOptions:
        """Foundations and projects offered by the filters, cached"""
        cached = get_cache(FILTERS_OPTIONS_CACHE_KEY)
        if cached is not None:
            return FiltersOptions(**cached)

        with read_snapshot(db):
            foundations = db.query(Foundation).order_by(Foundation.name).all()
            projects = db.query(Project).order_by(Project.foundation, Project.name).all()
            options = FiltersOptions(
                foundations=[
                    FoundationOption(name=f.name, display_name=f.display_name) for f in foundations
                ],
                projects=[_project_summary(p) for p in projects],
            )

        set_cache(FILTERS_OPTIONS_CACHE_KEY, options.model_dump(), ttl=settings.FILTERS_OPTIONS_CACHE_TTL)
        return options

    def invalidate_filters_options(self) -> None:
        """Drop the cached options after foundations or projects change"""
        delete_cache(FILTERS_OPTIONS_CACHE_KEY)


# Global instance
job_search_service = JobSearchService()


def page_job_ids(output: JobsSearchOutput) -> List[int]:
    return [job.job_id for job in output.jobs]
