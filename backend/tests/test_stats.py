from datetime import date, datetime, timezone

from app.jobboard.stats import get_stats
from app.models import JobView
from conftest import NOW


def _ms(day):
    return int(datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp() * 1000)


def _published(make_job, day, **fields):
    published_at = datetime(day.year, day.month, day.day, 10, tzinfo=timezone.utc)
    return make_job(published_at=published_at, first_published_at=published_at, **fields)


def test_publication_stats(db, board, make_job, cncf):
    kubernetes = cncf["projects"]["kubernetes"]
    _published(make_job, date(2026, 8, 10), projects=[kubernetes])
    _published(make_job, date(2026, 9, 5))
    _published(make_job, date(2026, 9, 20), projects=[kubernetes, cncf["projects"]["envoy"]])
    _published(make_job, date(2026, 10, 15))
    make_job(status="draft")

    stats = get_stats(db, board.id, now=NOW)

    assert stats.published_per_foundation == [["cncf", 2]]
    assert stats.published_per_month == [["2026", "Aug", 1], ["2026", "Sep", 2], ["2026", "Oct", 1]]
    assert stats.published_running_total == [
        [_ms(date(2026, 8, 10)), 1],
        [_ms(date(2026, 9, 5)), 2],
        [_ms(date(2026, 9, 20)), 3],
        [_ms(date(2026, 10, 15)), 4],
    ]


def test_views_stats(db, board, other_board, make_job, make_employer):
    job = make_job()
    elsewhere = make_job(employer=make_employer(job_board=other_board, company="Elsewhere"))
    db.add_all(
        [
            JobView(job_id=job.id, day=date(2026, 6, 1), total=5),
            JobView(job_id=job.id, day=date(2026, 10, 1), total=2),
            JobView(job_id=job.id, day=date(2026, 10, 17), total=3),
            JobView(job_id=elsewhere.id, day=date(2026, 10, 17), total=100),
        ]
    )
    db.commit()

    stats = get_stats(db, board.id, now=NOW)

    assert stats.views_daily == [[_ms(date(2026, 10, 1)), 2], [_ms(date(2026, 10, 17)), 3]]
    assert stats.views_monthly == [[_ms(date(2026, 6, 1)), 5], [_ms(date(2026, 10, 1)), 5]]


def test_reference_timestamps(db, board):
    stats = get_stats(db, board.id, now=NOW)

    assert stats.ts_now == int(NOW.timestamp() * 1000)
    assert stats.ts_one_month_ago == _ms(date(2026, 9, 18)) + 12 * 3600 * 1000
    assert stats.ts_two_years_ago == _ms(date(2024, 10, 18)) + 12 * 3600 * 1000
    assert stats.published_per_month == []
    assert stats.views_daily == []
