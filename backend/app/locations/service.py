"""
Location autocomplete
"""
from typing import List, Optional

from sqlalchemy.orm import Session
import structlog

from app.core.config import settings
from app.jobboard.schemas import LocationSummary
from app.jobboard.service import read_snapshot
from app.jobboard.text_search import build_search_query
from app.models.location import Location

logger = structlog.get_logger()


def search_locations(db: Session, ts_query: Optional[str], limit: Optional[int] = None) -> List[LocationSummary]:
    """
    Locations whose city, country or state match the query, with prefix
    matching on the last word. Best ranked first (city matches weigh more).
    """
    query = build_search_query(ts_query)
    if query is None:
        return []
    limit = limit or settings.LOCATION_SEARCH_LIMIT

    with read_snapshot(db):
        scored = [
            (query.rank(location.tsdoc), location)
            for location in db.query(Location).all()
            if query.matches(location.tsdoc)
        ]
        scored.sort(key=lambda item: (-item[0], item[1].city, item[1].id))
        results = [
            LocationSummary(
                location_id=location.id,
                city=location.city,
                country=location.country,
                state=location.state,
            )
            for _, location in scored[:limit]
        ]

    logger.debug("locations_searched", ts_query=ts_query, matches=len(scored))
    return results
