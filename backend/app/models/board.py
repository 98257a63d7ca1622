"""
Job board, employer and foundation membership models
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class JobBoard(Base):
    """Tenant scope grouping employers and their jobs"""

    __tablename__ = "job_boards"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    title = Column(String(255), nullable=False)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employers = relationship("Employer", back_populates="job_board")


class Foundation(Base):
    """Open source foundation tracking projects"""

    __tablename__ = "foundations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)  # e.g. cncf
    display_name = Column(String(255))


class Member(Base):
    """Foundation membership held by an employer"""

    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    foundation = Column(String(100), ForeignKey("foundations.name"), nullable=False)
    name = Column(String(255), nullable=False)
    level = Column(String(50))  # platinum, gold, silver...
    logo_url = Column(String(500))


class Employer(Base):
    """Company publishing jobs on a board"""

    __tablename__ = "employers"

    id = Column(Integer, primary_key=True, index=True)
    job_board_id = Column(Integer, ForeignKey("job_boards.id"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), index=True)

    company = Column(String(255), nullable=False)
    description = Column(Text)
    logo_id = Column(String(64))  # Image store reference
    website_url = Column(String(500))
    public = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    job_board = relationship("JobBoard", back_populates="employers")
    member = relationship("Member")
    location = relationship("Location")
    jobs = relationship("Job", back_populates="employer")
