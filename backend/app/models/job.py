"""
Job and project models
"""
import enum

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Table,
    Text,
    CheckConstraint,
    event,
)
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from app.core.database import Base
from app.jobboard.text_search import build_document


class JobKind(str, enum.Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACTOR = "contractor"
    INTERNSHIP = "internship"


class Workplace(str, enum.Enum):
    ON_SITE = "on-site"
    REMOTE = "remote"
    HYBRID = "hybrid"


class Seniority(str, enum.Enum):
    ENTRY = "entry"
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"


class JobStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    PENDING_APPROVAL = "pending-approval"
    REJECTED = "rejected"


job_project = Table(
    "job_projects",
    Base.metadata,
    Column("job_id", Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
)


class Project(Base):
    """Open source project tracked by a foundation"""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    maturity = Column(String(50))  # graduated, incubating, sandbox...
    logo_url = Column(String(500))
    foundation = Column(String(100), ForeignKey("foundations.name"), nullable=False, index=True)

    jobs = relationship("Job", secondary=job_project, back_populates="projects")


class Job(Base):
    """Job posting"""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    employer_id = Column(Integer, ForeignKey("employers.id"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), index=True)

    # Enumerated fields (see JobKind, Workplace, Seniority, JobStatus)
    kind = Column(String(20), nullable=False, index=True)
    workplace = Column(String(20), nullable=False, index=True)
    seniority = Column(String(20))
    status = Column(String(20), nullable=False, default=JobStatus.DRAFT.value, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    skills = Column(MutableList.as_mutable(JSON))  # Ordered list of skills
    benefits = Column(MutableList.as_mutable(JSON))  # Ordered list of benefits

    # Either a fixed salary or a min/max range
    salary = Column(BigInteger)
    salary_min = Column(BigInteger)
    salary_max = Column(BigInteger)
    salary_currency = Column(String(10))
    salary_period = Column(String(20))  # year, month, hour...

    open_source = Column(Integer)  # 0-100
    upstream_commitment = Column(Integer)  # 0-100

    # Derived from title (A), skills (B) and description (C). Never set directly.
    tsdoc = Column(JSON, nullable=False, default=dict)

    # Moderation
    review_notes = Column(Text)
    reviewed_at = Column(DateTime(timezone=True))

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    first_published_at = Column(DateTime(timezone=True))
    published_at = Column(DateTime(timezone=True), index=True)
    archived_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    employer = relationship("Employer", back_populates="jobs")
    location = relationship("Location")
    projects = relationship("Project", secondary=job_project, back_populates="jobs", order_by="Project.name")

    __table_args__ = (
        CheckConstraint("open_source >= 0 AND open_source <= 100", name="ck_jobs_open_source"),
        CheckConstraint(
            "upstream_commitment >= 0 AND upstream_commitment <= 100",
            name="ck_jobs_upstream_commitment",
        ),
    )

    @validates("kind")
    def validate_kind(self, key, value):
        return JobKind(value).value

    @validates("workplace")
    def validate_workplace(self, key, value):
        return Workplace(value).value

    @validates("seniority")
    def validate_seniority(self, key, value):
        return Seniority(value).value if value is not None else None

    @validates("status")
    def validate_status(self, key, value):
        return JobStatus(value).value

    def build_tsdoc(self):
        return build_document(
            [
                (self.title, "A"),
                (" ".join(self.skills or []), "B"),
                (self.description, "C"),
            ]
        )


@event.listens_for(Job, "before_insert")
@event.listens_for(Job, "before_update")
def _refresh_job_tsdoc(mapper, connection, target):
    target.tsdoc = target.build_tsdoc()
