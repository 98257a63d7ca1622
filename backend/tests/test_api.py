import pytest
from fastapi.testclient import TestClient

from app.core.database import get_db
from app.events.tracker import JOB_VIEWS, SEARCH_APPEARANCES, EventTracker, get_event_tracker
from app.jobboard import service
from app.main import app
from app.models import JobView, SearchAppearance
from conftest import BARCELONA


class RecordingSink:
    def __init__(self):
        self.batches = []

    def __call__(self, counter, data):
        self.batches.append((counter, data))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def tracker(sink):
    return EventTracker(sink=sink, clock=lambda: "2026-10-18")


@pytest.fixture
def client(session_factory, tracker, monkeypatch):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(service, "get_cache", lambda key: None)
    monkeypatch.setattr(service, "set_cache", lambda key, value, ttl=None: True)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_tracker] = lambda: tracker
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_search_with_query_string(client, board, make_job, tracker, sink):
    newest = make_job(title="Rust developer", kind="full-time")
    make_job(title="Rust developer", kind="part-time")
    older = make_job(title="Rust engineer", kind="full-time")

    response = client.get(
        f"/api/v1/boards/{board.id}/jobs/search",
        params={"kind[]": "full-time", "ts_query": "rust", "limit": 1},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [job["job_id"] for job in body["jobs"]] == [newest.id]
    assert body["jobs"][0]["employer"]["company"] == "Acme"

    tracker.flush()
    assert sink.batches == [(SEARCH_APPEARANCES, [(newest.id, "2026-10-18", 1)])]
    assert older.id not in [entry[0] for _, data in sink.batches for entry in data]


def test_search_with_json_body(client, board, make_job):
    match = make_job(skills=["go", "sql"], salary=80000)
    make_job(skills=["go"], salary=80000)

    response = client.post(
        f"/api/v1/boards/{board.id}/jobs/search",
        json={"skills": ["go", "sql"], "salary_min": 50000, "limit": "bogus"},
    )

    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert [job["job_id"] for job in response.json()["jobs"]] == [match.id]


def test_search_without_body(client, board, make_job):
    make_job()

    response = client.post(f"/api/v1/boards/{board.id}/jobs/search")

    assert response.status_code == 200
    assert response.json()["total"] == 1


def test_empty_results_track_nothing(client, board, tracker):
    response = client.get(f"/api/v1/boards/{board.id}/jobs/search")

    assert response.json() == {"jobs": [], "total": 0}
    assert tracker.is_empty()


def test_get_job(client, board, make_job):
    job = make_job(benefits=["remote-first"])

    response = client.get(f"/api/v1/boards/{board.id}/jobs/{job.id}")

    assert response.status_code == 200
    assert response.json()["benefits"] == ["remote-first"]
    assert response.json()["description"] == "Build things"


def test_get_missing_job(client, board, make_job):
    draft = make_job(status="draft")

    response = client.get(f"/api/v1/boards/{board.id}/jobs/{draft.id}")

    assert response.status_code == 404
    assert response.json()["error"]["type"] == "NotFoundError"


def test_track_job_view(client, board, make_job, tracker, sink):
    job = make_job()

    response = client.post(f"/api/v1/boards/{board.id}/jobs/{job.id}/views")
    client.post(f"/api/v1/boards/{board.id}/jobs/{job.id}/views")

    assert response.status_code == 204
    tracker.flush()
    assert sink.batches == [(JOB_VIEWS, [(job.id, "2026-10-18", 2)])]


def test_merge_counter_batches(client, db, make_job):
    job = make_job()

    views = client.post("/api/v1/events/jobs-views", json={"data": [[job.id, "2026-10-18", 4]]})
    appearances = client.post(
        "/api/v1/events/search-appearances",
        json={"lock_key": 2, "data": [[job.id, "2026-10-18", 9], ["bad"]]},
    )

    assert views.status_code == 204
    assert appearances.status_code == 204
    db.expire_all()
    assert db.query(JobView).one().total == 4
    assert db.query(SearchAppearance).one().total == 9


def test_filters_options(client, cncf):
    response = client.get("/api/v1/jobs/filters-options")

    assert response.status_code == 200
    assert response.json()["foundations"] == [{"name": "cncf", "display_name": "CNCF"}]


def test_board_stats(client, board, make_job):
    make_job()

    response = client.get(f"/api/v1/boards/{board.id}/stats")

    assert response.status_code == 200
    assert len(response.json()["published_running_total"]) == 1


def test_location_search(client, make_location):
    make_location(**BARCELONA)

    response = client.get("/api/v1/locations/search", params={"ts_query": "barce"})

    assert response.status_code == 200
    assert [location["city"] for location in response.json()] == ["Barcelona"]
