"""
Database models
"""
from app.models.board import JobBoard, Foundation, Member, Employer
from app.models.location import Location
from app.models.job import Job, Project, JobKind, Workplace, Seniority, JobStatus, job_project
from app.models.counters import JobView, SearchAppearance

__all__ = [
    "JobBoard",
    "Foundation",
    "Member",
    "Employer",
    "Location",
    "Job",
    "Project",
    "JobKind",
    "Workplace",
    "Seniority",
    "JobStatus",
    "job_project",
    "JobView",
    "SearchAppearance",
]
