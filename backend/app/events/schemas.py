"""
Event tracking Pydantic schemas
"""
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class CountersBatch(BaseModel):
    """Batch of [job_id, day, total] triples to add to the daily counters"""
    lock_key: Optional[int] = None
    data: List[List[Any]] = Field(default_factory=list)
