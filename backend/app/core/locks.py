"""
Advisory locks scoped to a database transaction
"""
import threading
from contextlib import contextmanager
from typing import Dict

from sqlalchemy import text
from sqlalchemy.orm import Session
import structlog

logger = structlog.get_logger()

_process_locks: Dict[int, threading.Lock] = {}
_process_locks_guard = threading.Lock()


def _process_lock(lock_key: int) -> threading.Lock:
    with _process_locks_guard:
        return _process_locks.setdefault(lock_key, threading.Lock())


@contextmanager
def advisory_xact_lock(db: Session, lock_key: int):
    """
    Hold the advisory lock identified by lock_key while the block runs.

    On PostgreSQL this is pg_advisory_xact_lock: it is shared by every
    process using the database and released when the transaction ends, so the
    block must commit or roll back before leaving. Other dialects get a named
    lock shared by the threads of this process.
    """
    if db.get_bind().dialect.name == "postgresql":
        db.execute(text("SELECT pg_advisory_xact_lock(:lock_key)"), {"lock_key": lock_key})
        yield
        return

    lock = _process_lock(lock_key)
    with lock:
        logger.debug("advisory_lock_acquired", lock_key=lock_key)
        yield
