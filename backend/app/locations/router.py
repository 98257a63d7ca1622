"""
Location routes
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.jobboard.schemas import LocationSummary
from app.locations.service import search_locations

router = APIRouter(prefix="/api/v1/locations", tags=["Locations"])


@router.get("/search", response_model=List[LocationSummary])
def search(
    ts_query: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Location autocomplete"""
    return search_locations(db, ts_query)
