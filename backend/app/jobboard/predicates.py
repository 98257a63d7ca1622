"""
Predicate compiler

Every filter dimension compiles to an independent predicate over a Job. A
dimension that was not requested compiles to AlwaysTrue. The compiled set is
a conjunction: a job is a result when every predicate matches it.

`matches` is the reference semantics of a predicate. `clause` optionally
returns a SQLAlchemy expression the store can use to narrow the candidates
before `matches` runs; it must never be stricter than `matches`.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy import and_, or_

from app.jobboard.filters import JobsFilters
from app.jobboard.geo import distance_m
from app.jobboard.text_search import SearchQuery, build_search_query
from app.models.board import Employer
from app.models.job import Job, JobStatus

Point = Tuple[float, float]


def published_day(value: Optional[datetime]) -> Optional[date]:
    """Calendar day (UTC) of a stored timestamp"""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


class Predicate:
    """Boolean test over a job for one filter dimension"""

    def matches(self, job: Job) -> bool:
        raise NotImplementedError

    def clause(self):
        return None

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class AlwaysTrue(Predicate):
    """Dimension not requested"""

    def matches(self, job: Job) -> bool:
        return True


class BoardScope(Predicate):
    """Published jobs whose employer belongs to the board"""

    def __init__(self, board_id: int):
        self.board_id = board_id

    def matches(self, job: Job) -> bool:
        return job.status == JobStatus.PUBLISHED.value and job.employer.job_board_id == self.board_id

    def clause(self):
        return and_(Employer.job_board_id == self.board_id, Job.status == JobStatus.PUBLISHED.value)


class ContainsAll(Predicate):
    """Job's list attribute is a superset of the requested values"""

    def __init__(self, attribute: str, values: Iterable[str]):
        self.attribute = attribute
        self.values = frozenset(values)

    def matches(self, job: Job) -> bool:
        return self.values <= set(getattr(job, self.attribute) or [])


class OneOf(Predicate):
    """Job's scalar attribute is one of the requested values"""

    def __init__(self, attribute: str, values: Iterable[str]):
        self.attribute = attribute
        self.values = frozenset(values)

    def matches(self, job: Job) -> bool:
        return getattr(job, self.attribute) in self.values

    def clause(self):
        return getattr(Job, self.attribute).in_(sorted(self.values))


class Equals(Predicate):
    def __init__(self, attribute: str, value: str):
        self.attribute = attribute
        self.value = value

    def matches(self, job: Job) -> bool:
        return getattr(job, self.attribute) == self.value

    def clause(self):
        return getattr(Job, self.attribute) == self.value


class AtLeast(Predicate):
    """Job's numeric attribute is present and >= minimum"""

    def __init__(self, attribute: str, minimum: int):
        self.attribute = attribute
        self.minimum = minimum

    def matches(self, job: Job) -> bool:
        value = getattr(job, self.attribute)
        return value is not None and value >= self.minimum

    def clause(self):
        return getattr(Job, self.attribute) >= self.minimum


class MinimumSalary(Predicate):
    """Fixed salary, or else the range minimum, is >= minimum"""

    def __init__(self, minimum: int):
        self.minimum = minimum

    def matches(self, job: Job) -> bool:
        if job.salary is not None:
            return job.salary >= self.minimum
        if job.salary_min is not None:
            return job.salary_min >= self.minimum
        return False

    def clause(self):
        return or_(
            Job.salary >= self.minimum,
            and_(Job.salary.is_(None), Job.salary_min >= self.minimum),
        )


class PublishedBetween(Predicate):
    """published_at within [date_from, date_to], both bounds optional and inclusive"""

    def __init__(self, date_from: Optional[date], date_to: Optional[date]):
        self.date_from = date_from
        self.date_to = date_to

    def matches(self, job: Job) -> bool:
        day = published_day(job.published_at)
        if day is None:
            return False
        if self.date_from is not None and day < self.date_from:
            return False
        if self.date_to is not None and day > self.date_to:
            return False
        return True

    def clause(self):
        # One day of slack either side: the store's timezone must not drop a row
        conditions = []
        if self.date_from is not None:
            conditions.append(Job.published_at >= datetime.combine(self.date_from - timedelta(days=1), time.min))
        if self.date_to is not None:
            conditions.append(Job.published_at < datetime.combine(self.date_to + timedelta(days=2), time.min))
        return and_(*conditions)


class WithinDistance(Predicate):
    """Job's location is at most max_distance metres away from the origin"""

    def __init__(self, origin: Optional[Point], max_distance: float):
        self.origin = origin
        self.max_distance = max_distance

    def matches(self, job: Job) -> bool:
        if self.origin is None or job.location is None:
            return False
        if job.location.latitude is None or job.location.longitude is None:
            return False
        distance = distance_m(self.origin[0], self.origin[1], job.location.latitude, job.location.longitude)
        return distance <= self.max_distance

    def clause(self):
        if self.origin is None:
            return Job.id.is_(None)
        return Job.location_id.is_not(None)


class LinkedToProjects(Predicate):
    """Job is linked to at least one project with a requested name"""

    def __init__(self, names: Iterable[str]):
        self.names = frozenset(names)

    def matches(self, job: Job) -> bool:
        return any(project.name in self.names for project in job.projects)


class LinkedToFoundation(Predicate):
    """Job is linked to at least one project of the foundation"""

    def __init__(self, foundation: str):
        self.foundation = foundation

    def matches(self, job: Job) -> bool:
        return any(project.foundation == self.foundation for project in job.projects)


class MatchesText(Predicate):
    """Job's searchable document matches the prefix-expanded query"""

    def __init__(self, query: SearchQuery):
        self.query = query

    def matches(self, job: Job) -> bool:
        return self.query.matches(job.tsdoc)

    def __repr__(self):
        return f"MatchesText({self.query!r})"


class Conjunction:
    """All compiled predicates, keyed by dimension"""

    def __init__(self, predicates: Dict[str, Predicate]):
        self.predicates = predicates

    def __getitem__(self, dimension: str) -> Predicate:
        return self.predicates[dimension]

    def matches(self, job: Job) -> bool:
        return all(predicate.matches(job) for predicate in self.predicates.values())

    def clauses(self):
        clauses = []
        for predicate in self.predicates.values():
            clause = predicate.clause()
            if clause is not None:
                clauses.append(clause)
        return clauses


def compile_predicates(board_id: int, filters: JobsFilters, origin: Optional[Point] = None) -> Conjunction:
    """
    Compile the filters into one predicate per dimension.
    origin is the point of filters.location_id, None when that location does not exist.
    """
    always = AlwaysTrue()
    text_query = build_search_query(filters.ts_query)

    predicates: Dict[str, Predicate] = {
        "scope": BoardScope(board_id),
        "benefits": ContainsAll("benefits", filters.benefits) if filters.benefits else always,
        "skills": ContainsAll("skills", filters.skills) if filters.skills else always,
        "kind": OneOf("kind", [k.value for k in filters.kind]) if filters.kind else always,
        "workplace": OneOf("workplace", [w.value for w in filters.workplace]) if filters.workplace else always,
        "date_range": (
            PublishedBetween(filters.date_from, filters.date_to)
            if filters.date_from is not None or filters.date_to is not None
            else always
        ),
        "distance": (
            WithinDistance(origin, filters.max_distance)
            if filters.location_id is not None and filters.max_distance is not None
            else always
        ),
        "projects": LinkedToProjects(filters.projects) if filters.projects else always,
        "foundation": LinkedToFoundation(filters.foundation) if filters.foundation else always,
        "salary_min": MinimumSalary(filters.salary_min) if filters.salary_min is not None else always,
        "seniority": Equals("seniority", filters.seniority.value) if filters.seniority is not None else always,
        "open_source": AtLeast("open_source", filters.open_source) if filters.open_source is not None else always,
        "upstream_commitment": (
            AtLeast("upstream_commitment", filters.upstream_commitment)
            if filters.upstream_commitment is not None
            else always
        ),
        "ts_query": MatchesText(text_query) if text_query is not None else always,
    }
    return Conjunction(predicates)
