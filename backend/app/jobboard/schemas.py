"""
Job board Pydantic schemas
"""
from typing import Optional, List, Any
from pydantic import BaseModel
from datetime import datetime


class MemberSummary(BaseModel):
    """Foundation membership of an employer"""
    member_id: int
    name: str
    level: Optional[str] = None
    logo_url: Optional[str] = None
    foundation: Optional[str] = None


class EmployerSummary(BaseModel):
    employer_id: int
    company: str
    logo_id: Optional[str] = None
    website_url: Optional[str] = None
    member: Optional[MemberSummary] = None


class EmployerDetail(EmployerSummary):
    description: Optional[str] = None


class LocationSummary(BaseModel):
    location_id: int
    city: str
    country: str
    state: Optional[str] = None


class ProjectSummary(BaseModel):
    project_id: int
    name: str
    maturity: Optional[str] = None
    logo_url: Optional[str] = None
    foundation: Optional[str] = None


class JobSummary(BaseModel):
    """Job as listed in search results"""
    job_id: int
    title: str
    kind: str
    workplace: str
    seniority: Optional[str] = None
    published_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    open_source: Optional[int] = None
    upstream_commitment: Optional[int] = None
    salary: Optional[int] = None
    salary_currency: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_period: Optional[str] = None
    skills: Optional[List[str]] = None
    employer: EmployerSummary
    location: Optional[LocationSummary] = None
    projects: Optional[List[ProjectSummary]] = None


class JobDetail(JobSummary):
    """Full published job"""
    description: str
    benefits: Optional[List[str]] = None
    employer: EmployerDetail


class JobsSearchOutput(BaseModel):
    """Page of matching jobs and the total number of matches"""
    jobs: List[JobSummary]
    total: int


class FoundationOption(BaseModel):
    name: str
    display_name: Optional[str] = None


class FiltersOptions(BaseModel):
    """Values offered by the search filters"""
    foundations: List[FoundationOption]
    projects: List[ProjectSummary]


class JobBoardStats(BaseModel):
    published_per_foundation: List[List[Any]]
    published_per_month: List[List[Any]]
    published_running_total: List[List[Any]]
    views_daily: List[List[Any]]
    views_monthly: List[List[Any]]
    ts_now: int
    ts_one_month_ago: int
    ts_two_years_ago: int
