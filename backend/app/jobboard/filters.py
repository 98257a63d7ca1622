"""
Filter normalization: loose request parameters to a typed filter set
"""
from datetime import date, datetime, timedelta
from typing import Any, List, Mapping, Optional, Type, TypeVar
import enum

from dateutil import parser as date_parser
from pydantic import BaseModel, Field
import structlog

from app.core.config import settings
from app.core.database import BIGINT_MAX, BIGINT_MIN
from app.models.job import JobKind, Seniority, Workplace

logger = structlog.get_logger()

E = TypeVar("E", bound=enum.Enum)

# Relative date ranges accepted in place of an explicit date_from
DATE_RANGES = {
    "last-day": 1,
    "last-3-days": 3,
    "last-7-days": 7,
    "last-30-days": 30,
}


class JobsFilters(BaseModel):
    """Typed filters used to search jobs. Empty lists and None mean no constraint."""
    ts_query: Optional[str] = None
    kind: List[JobKind] = Field(default_factory=list)
    workplace: List[Workplace] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    projects: List[str] = Field(default_factory=list)
    foundation: Optional[str] = None
    location_id: Optional[int] = None
    max_distance: Optional[float] = None  # metres
    salary_min: Optional[int] = None
    seniority: Optional[Seniority] = None
    open_source: Optional[int] = None
    upstream_commitment: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: int = 10
    offset: int = 0


def _raw_values(params: Mapping[str, Any], key: str) -> List[Any]:
    """All values supplied for key, accepting `key`, `key[]` and repeated keys"""
    values: List[Any] = []
    for name in (key, f"{key}[]"):
        if hasattr(params, "getlist"):
            values.extend(params.getlist(name))
            continue
        value = params.get(name)
        if value is None:
            continue
        if isinstance(value, (list, tuple, set)):
            values.extend(value)
        else:
            values.append(value)
    return values


def _scalar(params: Mapping[str, Any], key: str) -> Any:
    values = _raw_values(params, key)
    if not values:
        return None
    value = values[-1]
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    return value


def _invalid(key: str, value: Any) -> None:
    logger.debug("filter_value_ignored", filter=key, value=str(value))
    return None


def _parse_int(params: Mapping[str, Any], key: str) -> Optional[int]:
    value = _scalar(params, key)
    if value is None:
        return None
    if isinstance(value, bool):
        return _invalid(key, value)
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if not value.is_integer():
            return _invalid(key, value)
        parsed = int(value)
    else:
        try:
            parsed = int(str(value))
        except ValueError:
            return _invalid(key, value)
    # Larger values cannot be bound as database parameters
    if not BIGINT_MIN <= parsed <= BIGINT_MAX:
        return _invalid(key, value)
    return parsed


def _parse_float(params: Mapping[str, Any], key: str) -> Optional[float]:
    value = _scalar(params, key)
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return _invalid(key, value)
    if parsed != parsed or parsed in (float("inf"), float("-inf")):
        return _invalid(key, value)
    return parsed


def _parse_date(params: Mapping[str, Any], key: str) -> Optional[date]:
    value = _scalar(params, key)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.isoparse(str(value)).date()
    except (ValueError, OverflowError):
        return _invalid(key, value)


def _parse_enum(enum_cls: Type[E], key: str, value: Any) -> Optional[E]:
    if value is None:
        return None
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return _invalid(key, value)


def _parse_strings(params: Mapping[str, Any], key: str) -> List[str]:
    strings: List[str] = []
    for value in _raw_values(params, key):
        if isinstance(value, Mapping):
            # Project entries may come as {"foundation": ..., "name": ...}
            value = value.get("name")
        if value is None:
            continue
        value = str(value).strip()
        if value and value not in strings:
            strings.append(value)
    return strings


def _parse_enums(params: Mapping[str, Any], key: str, enum_cls: Type[E]) -> List[E]:
    members: List[E] = []
    for value in _parse_strings(params, key):
        member = _parse_enum(enum_cls, key, value)
        if member is not None and member not in members:
            members.append(member)
    return members


def normalize_filters(params: Optional[Mapping[str, Any]], today: Optional[date] = None) -> JobsFilters:
    """
    Build the typed filter set from a loose parameter bag.
    Malformed values are ignored (the dimension is not applied) instead of rejected.
    """
    params = params or {}
    today = today or date.today()

    limit = _parse_int(params, "limit")
    if limit is None or limit < 1:
        limit = settings.SEARCH_DEFAULT_LIMIT

    offset = _parse_int(params, "offset")
    if offset is None or offset < 0:
        offset = 0

    max_distance = _parse_float(params, "max_distance")
    if max_distance is not None and max_distance < 0:
        max_distance = _invalid("max_distance", max_distance)

    ts_query = _scalar(params, "ts_query")
    foundation = _scalar(params, "foundation")

    date_from = _parse_date(params, "date_from")
    date_range = _scalar(params, "date_range")
    if date_from is None and date_range is not None:
        days = DATE_RANGES.get(str(date_range).lower())
        if days is None:
            _invalid("date_range", date_range)
        else:
            date_from = today - timedelta(days=days)

    return JobsFilters(
        ts_query=str(ts_query) if ts_query is not None else None,
        kind=_parse_enums(params, "kind", JobKind),
        workplace=_parse_enums(params, "workplace", Workplace),
        benefits=_parse_strings(params, "benefits"),
        skills=_parse_strings(params, "skills"),
        projects=_parse_strings(params, "projects"),
        foundation=str(foundation) if foundation is not None else None,
        location_id=_parse_int(params, "location_id"),
        max_distance=max_distance,
        salary_min=_parse_int(params, "salary_min"),
        seniority=_parse_enum(Seniority, "seniority", _scalar(params, "seniority")),
        open_source=_parse_int(params, "open_source"),
        upstream_commitment=_parse_int(params, "upstream_commitment"),
        date_from=date_from,
        date_to=_parse_date(params, "date_to"),
        limit=limit,
        offset=offset,
    )

