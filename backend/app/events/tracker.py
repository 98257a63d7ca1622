"""
Event tracker - buffers job views and search appearances in memory and
flushes them in batches to the daily counters.

Events are aggregated per (job_id, day) so a flush sends one triple per job
and day, no matter how many events were tracked in between. Batches are
flushed periodically by a background thread and once more when the tracker
stops.
"""
import threading
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple, Union

import structlog

from app.core.config import settings

logger = structlog.get_logger()

# [job_id, "YYYY-MM-DD", total]
BatchEntry = Tuple[int, str, int]
BatchSink = Callable[[str, List[BatchEntry]], None]

JOB_VIEWS = "job_views"
SEARCH_APPEARANCES = "search_appearances"


@dataclass(frozen=True)
class JobView:
    """A single job view"""
    job_id: int


@dataclass(frozen=True)
class SearchAppearances:
    """Jobs shown together in one page of search results"""
    job_ids: Sequence[int] = field(default_factory=tuple)


Event = Union[JobView, SearchAppearances]


def today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def prepare_batch_data(counts: Counter) -> List[BatchEntry]:
    """Aggregated counts as sorted [job_id, day, total] triples"""
    return sorted((job_id, day, total) for (job_id, day), total in counts.items())


def celery_sink(counter: str, data: List[BatchEntry]) -> None:
    """Hand a batch to the worker that merges it into the database"""
    from app.tasks.event_tasks import update_jobs_views_task, update_search_appearances_task

    if counter == JOB_VIEWS:
        update_jobs_views_task.delay(data)
    else:
        update_search_appearances_task.delay(data)


class EventTracker:
    """Thread-safe in-memory aggregation of tracking events"""

    def __init__(
        self,
        sink: Optional[BatchSink] = None,
        flush_frequency: Optional[float] = None,
        clock: Callable[[], str] = today,
    ):
        self.sink = sink or celery_sink
        self.flush_frequency = flush_frequency or settings.EVENTS_FLUSH_FREQUENCY_SECONDS
        self.clock = clock
        self._job_views: Counter = Counter()
        self._search_appearances: Counter = Counter()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._worker: Optional[threading.Thread] = None

    def track(self, event: Event) -> None:
        """Record an event, it reaches the database on the next flush"""
        day = self.clock()
        with self._lock:
            if isinstance(event, JobView):
                self._job_views[(event.job_id, day)] += 1
            elif isinstance(event, SearchAppearances):
                for job_id in event.job_ids:
                    self._search_appearances[(job_id, day)] += 1
            else:
                raise TypeError(f"Unknown event: {event!r}")

    def is_empty(self) -> bool:
        with self._lock:
            return not self._job_views and not self._search_appearances

    def _take_batches(self) -> Tuple[Counter, Counter]:
        with self._lock:
            job_views, self._job_views = self._job_views, Counter()
            search_appearances, self._search_appearances = self._search_appearances, Counter()
        return job_views, search_appearances

    def flush(self) -> None:
        """Send everything aggregated so far to the sink"""
        job_views, search_appearances = self._take_batches()
        for counter, counts in ((JOB_VIEWS, job_views), (SEARCH_APPEARANCES, search_appearances)):
            if not counts:
                continue
            data = prepare_batch_data(counts)
            try:
                self.sink(counter, data)
                logger.debug("events_flushed", counter=counter, entries=len(data))
            except Exception as e:
                logger.error("events_flush_failed", counter=counter, entries=len(data), error=str(e))

    def _run(self) -> None:
        while not self._stop.wait(self.flush_frequency):
            self.flush()

    def start(self) -> None:
        """Start the periodic flusher thread"""
        if self._worker is not None:
            return
        self._stop.clear()
        self._worker = threading.Thread(target=self._run, name="event-tracker", daemon=True)
        self._worker.start()
        logger.info("event_tracker_started", flush_frequency=self.flush_frequency)

    def stop(self) -> None:
        """Stop the flusher thread and flush pending events"""
        self._stop.set()
        if self._worker is not None:
            self._worker.join()
            self._worker = None
        self.flush()
        logger.info("event_tracker_stopped")


# Global instance
event_tracker = EventTracker()


def get_event_tracker() -> EventTracker:
    """Dependency returning the process event tracker"""
    return event_tracker
