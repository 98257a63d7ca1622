from datetime import timedelta

import pytest

from app.core.exceptions import NotFoundError
from app.jobboard import service
from app.jobboard.filters import normalize_filters
from app.jobboard.service import job_search_service
from app.jobs.lifecycle import archive_job
from app.models import Job
from conftest import BARCELONA, GIRONA, MADRID, NOW


def _search(db, board, **params):
    return job_search_service.search_jobs(db, board.id, normalize_filters(params))


def _ids(output):
    return [job.job_id for job in output.jobs]


def test_results_are_newest_first(db, board, make_job):
    oldest = make_job(published_at=NOW - timedelta(days=3))
    newest = make_job(published_at=NOW)
    middle = make_job(published_at=NOW - timedelta(days=1))

    output = _search(db, board)

    assert _ids(output) == [newest.id, middle.id, oldest.id]
    assert output.total == 3


def test_same_publication_time_orders_by_id(db, board, make_job):
    jobs = [make_job(published_at=NOW) for _ in range(3)]

    assert _ids(_search(db, board)) == sorted((job.id for job in jobs), reverse=True)


def test_pages_partition_the_filtered_set(db, board, make_job):
    full_time = {make_job(kind="full-time").id for _ in range(21)}
    for _ in range(4):
        make_job(kind="part-time")

    pages = [_search(db, board, kind="full-time", limit=10, offset=offset) for offset in (0, 10, 20)]

    assert [len(page.jobs) for page in pages] == [10, 10, 1]
    assert all(page.total == 21 for page in pages)
    seen = [job_id for page in pages for job_id in _ids(page)]
    assert len(seen) == len(set(seen))
    assert set(seen) == full_time


def test_offset_past_the_end_returns_total(db, board, make_job):
    for _ in range(3):
        make_job()

    output = _search(db, board, offset=10)

    assert output.jobs == []
    assert output.total == 3


def test_search_is_repeatable(db, board, make_job):
    for i in range(5):
        make_job(title=f"Engineer {i}", skills=["rust"])

    first = _search(db, board, skills=["rust"], limit=3)
    second = _search(db, board, skills=["rust"], limit=3)

    assert first == second


def test_only_published_jobs_of_the_board(db, board, other_board, make_job, make_employer):
    published = make_job()
    make_job(status="draft")
    make_job(status="pending-approval")
    make_job(employer=make_employer(job_board=other_board, company="Elsewhere"))

    output = _search(db, board)

    assert _ids(output) == [published.id]


def test_archived_jobs_leave_the_results(db, board, make_job):
    kept = make_job()
    archived = make_job()

    archive_job(db, archived.id)

    assert _ids(_search(db, board)) == [kept.id]


def test_filters_combine(db, board, make_job):
    match = make_job(kind="full-time", workplace="remote", skills=["rust", "sql"], salary=90000)
    make_job(kind="full-time", workplace="on-site", skills=["rust", "sql"], salary=90000)
    make_job(kind="full-time", workplace="remote", skills=["rust"], salary=90000)
    make_job(kind="full-time", workplace="remote", skills=["rust", "sql"], salary=40000)

    output = _search(db, board, kind="full-time", workplace=["remote", "hybrid"], skills=["rust", "sql"], salary_min=60000)

    assert _ids(output) == [match.id]


def test_salary_range_minimum(db, board, make_job):
    in_range = make_job(salary_min=70000, salary_max=90000)
    make_job(salary_min=30000, salary_max=90000)
    make_job()

    assert _ids(_search(db, board, salary_min=60000)) == [in_range.id]


def test_date_range(db, board, make_job):
    recent = make_job(published_at=NOW - timedelta(days=2))
    make_job(published_at=NOW - timedelta(days=20))

    output = _search(db, board, date_from=(NOW - timedelta(days=7)).date().isoformat())

    assert _ids(output) == [recent.id]


def test_text_query_with_prefix(db, board, make_job):
    rust = make_job(title="Rust developer")
    make_job(title="Rust designer")
    make_job(title="Go developer")

    assert _ids(_search(db, board, ts_query="rust dev")) == [rust.id]


def test_projects_and_foundation(db, board, make_job, cncf):
    kubernetes = make_job(projects=[cncf["projects"]["kubernetes"]])
    envoy = make_job(projects=[cncf["projects"]["envoy"]])
    make_job()

    assert _ids(_search(db, board, projects=["kubernetes"])) == [kubernetes.id]
    assert set(_ids(_search(db, board, foundation="cncf"))) == {kubernetes.id, envoy.id}


def test_distance_from_a_location(db, board, make_job, make_location):
    barcelona = make_location(**BARCELONA)
    in_barcelona = make_job(location_id=barcelona.id)
    in_girona = make_job(location_id=make_location(**GIRONA).id)
    make_job(location_id=make_location(**MADRID).id)
    make_job()

    output = _search(db, board, location_id=barcelona.id, max_distance=100000)

    assert set(_ids(output)) == {in_barcelona.id, in_girona.id}
    assert output.total == 2


def test_unknown_location_matches_nothing(db, board, make_job, make_location):
    make_job(location_id=make_location(**BARCELONA).id)

    output = _search(db, board, location_id=9999, max_distance=100000)

    assert output.jobs == []
    assert output.total == 0


def test_huge_numbers_do_not_break_the_search(db, board, make_job, make_location):
    job = make_job(salary=50000, location_id=make_location(**BARCELONA).id)

    by_salary = _search(db, board, salary_min="99999999999999999999")
    by_distance = _search(db, board, location_id="99999999999999999999", max_distance="10")

    assert _ids(by_salary) == [job.id]
    assert _ids(by_distance) == [job.id]


def test_in_place_skill_edits_refresh_the_text_document(db, board, make_job):
    job = make_job(title="Backend engineer", skills=["python"])
    assert _ids(_search(db, board, ts_query="zig")) == []

    job.skills.append("zig")
    db.commit()
    db.expire_all()

    assert db.get(Job, job.id).skills == ["python", "zig"]
    assert _ids(_search(db, board, ts_query="zig")) == [job.id]
    assert _ids(_search(db, board, skills=["zig"])) == [job.id]


def test_summary_fields(db, board, make_job, make_location, cncf, make_employer):
    employer = make_employer(company="Acme", member_id=cncf["member"].id, logo_id="logo-1")
    barcelona = make_location(**BARCELONA)
    job = make_job(employer=employer, location_id=barcelona.id, skills=["go"], seniority="senior")

    summary = _search(db, board).jobs[0]

    assert summary.job_id == job.id
    assert summary.seniority == "senior"
    assert summary.skills == ["go"]
    assert summary.employer.company == "Acme"
    assert summary.employer.member.level == "gold"
    assert summary.location.city == "Barcelona"
    assert summary.projects is None


def test_get_job_returns_published_details(db, board, make_job, make_employer, cncf):
    employer = make_employer(company="Acme", description="We build things")
    job = make_job(employer=employer, benefits=["remote-first"], projects=[cncf["projects"]["envoy"]])

    detail = job_search_service.get_job(db, board.id, job.id)

    assert detail.job_id == job.id
    assert detail.description == "Build things"
    assert detail.benefits == ["remote-first"]
    assert detail.employer.description == "We build things"
    assert [p.name for p in detail.projects] == ["envoy"]


@pytest.mark.parametrize("status", ["draft", "archived", "rejected"])
def test_get_job_hides_unpublished_jobs(db, board, make_job, status):
    job = make_job(status=status)

    with pytest.raises(NotFoundError):
        job_search_service.get_job(db, board.id, job.id)


def test_get_job_of_another_board(db, board, other_board, make_job):
    job = make_job()

    with pytest.raises(NotFoundError):
        job_search_service.get_job(db, other_board.id, job.id)


def test_filters_options_are_cached(db, cncf, monkeypatch):
    stored = {}
    monkeypatch.setattr(service, "get_cache", lambda key: stored.get(key))
    monkeypatch.setattr(service, "set_cache", lambda key, value, ttl=None: stored.update({key: value}) or True)

    options = job_search_service.get_filters_options(db)

    assert [f.name for f in options.foundations] == ["cncf"]
    assert [p.name for p in options.projects] == ["envoy", "kubernetes"]
    assert service.FILTERS_OPTIONS_CACHE_KEY in stored
    assert job_search_service.get_filters_options(db) == options
