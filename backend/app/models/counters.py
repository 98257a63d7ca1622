"""
Per job, per day event counters
"""
from sqlalchemy import Column, Integer, Date, ForeignKey
from app.core.database import Base


class JobView(Base):
    """Number of times a job was viewed on a day"""

    __tablename__ = "job_views"

    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True)
    day = Column(Date, primary_key=True)
    total = Column(Integer, nullable=False, default=0)


class SearchAppearance(Base):
    """Number of times a job appeared in search results on a day"""

    __tablename__ = "search_appearances"

    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True)
    day = Column(Date, primary_key=True)
    total = Column(Integer, nullable=False, default=0)
