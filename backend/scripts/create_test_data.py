"""
Script to create test data for development
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import SessionLocal
from app.core.logging_config import configure_logging
from app.jobboard.service import job_search_service
from app.jobs.lifecycle import publish_job, request_approval
from app.models import Employer, Foundation, Job, JobBoard, Location, Member, Project
import structlog

logger = structlog.get_logger()

LOCATIONS = [
    {"city": "Barcelona", "country": "Spain", "state": "Catalonia", "latitude": 41.3874, "longitude": 2.1686},
    {"city": "Girona", "country": "Spain", "state": "Catalonia", "latitude": 41.9794, "longitude": 2.8214},
    {"city": "Madrid", "country": "Spain", "state": "Community of Madrid", "latitude": 40.4168, "longitude": -3.7038},
    {"city": "San Francisco", "country": "United States", "state": "California", "latitude": 37.7749, "longitude": -122.4194},
]

JOBS = [
    {
        "title": "Senior Backend Engineer",
        "description": "Design and operate the services behind our public APIs.",
        "kind": "full-time",
        "workplace": "hybrid",
        "seniority": "senior",
        "skills": ["python", "postgresql", "kubernetes"],
        "benefits": ["flexible-hours", "remote-first"],
        "salary_min": 70000,
        "salary_max": 90000,
        "salary_currency": "EUR",
        "salary_period": "year",
        "open_source": 40,
        "upstream_commitment": 20,
        "projects": ["kubernetes"],
        "city": "Barcelona",
    },
    {
        "title": "Rust Developer",
        "description": "Work on our edge proxy and contribute upstream.",
        "kind": "full-time",
        "workplace": "remote",
        "seniority": "mid",
        "skills": ["rust", "envoy"],
        "benefits": ["remote-first"],
        "salary": 65000,
        "salary_currency": "EUR",
        "salary_period": "year",
        "open_source": 80,
        "upstream_commitment": 50,
        "projects": ["envoy"],
        "city": "Madrid",
    },
    {
        "title": "Platform Engineering Intern",
        "description": "Help us automate cluster operations.",
        "kind": "internship",
        "workplace": "on-site",
        "seniority": "entry",
        "skills": ["go", "kubernetes"],
        "city": "San Francisco",
    },
]


def get_board(db: Session) -> JobBoard:
    board = db.query(JobBoard).filter(JobBoard.name == settings.DEFAULT_BOARD_NAME).first()
    if not board:
        raise RuntimeError("Default board not found, run scripts/init_db.py first")
    return board


def create_test_foundation(db: Session):
    """Create a foundation with a member and two projects"""
    if db.query(Foundation).filter(Foundation.name == "cncf").first():
        logger.info("test_foundation_exists")
        return

    db.add(Foundation(name="cncf", display_name="CNCF"))
    db.flush()
    db.add(Member(foundation="cncf", name="Tech Corp", level="gold"))
    db.add_all(
        [
            Project(name="kubernetes", maturity="graduated", foundation="cncf"),
            Project(name="envoy", maturity="graduated", foundation="cncf"),
        ]
    )
    db.commit()
    job_search_service.invalidate_filters_options()
    logger.info("test_foundation_created")


def create_test_locations(db: Session):
    for data in LOCATIONS:
        if not db.query(Location).filter(Location.city == data["city"]).first():
            db.add(Location(**data))
    db.commit()


def create_test_jobs(db: Session):
    """Create an employer and publish its jobs"""
    board = get_board(db)
    if db.query(Employer).filter(Employer.company == "Tech Corp").first():
        logger.info("test_jobs_exist")
        return

    member = db.query(Member).filter(Member.name == "Tech Corp").first()
    employer = Employer(
        job_board_id=board.id,
        member_id=member.id if member else None,
        company="Tech Corp",
        description="We build developer infrastructure.",
        website_url="https://techcorp.example",
        public=True,
    )
    db.add(employer)
    db.flush()

    for data in JOBS:
        data = dict(data)
        projects = db.query(Project).filter(Project.name.in_(data.pop("projects", []))).all()
        location = db.query(Location).filter(Location.city == data.pop("city")).first()
        job = Job(employer_id=employer.id, location_id=location.id if location else None, **data)
        job.projects = projects
        db.add(job)
        db.commit()

        request_approval(db, job.id)
        publish_job(db, job.id)
        logger.info("test_job_created", job_id=job.id, title=job.title)


def main():
    """Main function"""
    configure_logging()
    db: Session = SessionLocal()
    try:
        create_test_foundation(db)
        create_test_locations(db)
        create_test_jobs(db)
        logger.info("test_data_created")
    except Exception as e:
        logger.error("test_data_creation_failed", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
