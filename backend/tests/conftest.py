import os
import tempfile

# Settings are read on import, point them at a throwaway database first
os.environ.setdefault("DATABASE_URL", "sqlite:///" + os.path.join(tempfile.mkdtemp(), "jobboard.db"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.core.database import Base
from app.models import Employer, Foundation, Job, JobBoard, JobStatus, Location, Member, Project

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

BARCELONA = dict(city="Barcelona", country="Spain", state="Catalonia", latitude=41.3874, longitude=2.1686)
GIRONA = dict(city="Girona", country="Spain", state="Catalonia", latitude=41.9794, longitude=2.8214)
MADRID = dict(city="Madrid", country="Spain", state="Community of Madrid", latitude=40.4168, longitude=-3.7038)


@pytest.fixture
def engine(tmp_path):
    """File backed SQLite database, shared by every session of a test"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'jobboard.db'}",
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def board(db):
    board = JobBoard(name="main", title="Main board")
    db.add(board)
    db.commit()
    return board


@pytest.fixture
def other_board(db):
    board = JobBoard(name="other", title="Other board")
    db.add(board)
    db.commit()
    return board


@pytest.fixture
def cncf(db):
    """Foundation with two projects and a member"""
    db.add(Foundation(name="cncf", display_name="CNCF"))
    db.flush()
    member = Member(foundation="cncf", name="Acme", level="gold")
    projects = [
        Project(name="kubernetes", maturity="graduated", foundation="cncf"),
        Project(name="envoy", maturity="graduated", foundation="cncf"),
    ]
    db.add(member)
    db.add_all(projects)
    db.commit()
    return {"member": member, "projects": {p.name: p for p in projects}}


@pytest.fixture
def make_location(db):
    def _make_location(**fields):
        location = Location(**fields)
        db.add(location)
        db.commit()
        return location

    return _make_location


@pytest.fixture
def make_employer(db, board):
    def _make_employer(job_board=None, **fields):
        fields.setdefault("company", "Acme")
        employer = Employer(job_board_id=(job_board or board).id, **fields)
        db.add(employer)
        db.commit()
        return employer

    return _make_employer


@pytest.fixture
def employer(make_employer):
    return make_employer(company="Acme", website_url="https://acme.example")


@pytest.fixture
def make_job(db, employer):
    """
    Create a job, published by default. Each job is published one hour before
    the previous one unless published_at is given.
    """
    ages = count()

    def _make_job(employer=employer, projects=(), **fields):
        fields.setdefault("title", "Software Engineer")
        fields.setdefault("description", "Build things")
        fields.setdefault("kind", "full-time")
        fields.setdefault("workplace", "remote")
        fields.setdefault("status", JobStatus.PUBLISHED.value)
        if fields["status"] == JobStatus.PUBLISHED.value:
            fields.setdefault("published_at", NOW - timedelta(hours=next(ages)))
            fields.setdefault("first_published_at", fields["published_at"])
        job = Job(employer_id=employer.id, **fields)
        job.projects = list(projects)
        db.add(job)
        db.commit()
        return job

    return _make_job
