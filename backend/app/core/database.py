"""
Database connection and session management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool
from typing import Generator
import structlog

from app.core.config import settings

logger = structlog.get_logger()

# Range of the BIGINT columns and of SQLite integer parameters
BIGINT_MIN = -(2**63)
BIGINT_MAX = 2**63 - 1


def _engine_options(url: str) -> dict:
    """Pooling options for the configured database"""
    if url.startswith("sqlite"):
        # SQLite connections are shared between the web and tracker threads
        return {"connect_args": {"check_same_thread": False}}
    return {
        "poolclass": QueuePool,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,  # Verify connections before using
    }


# Create database engine with connection pooling
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(settings.DATABASE_URL),
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database session
    Yields a database session and ensures it's closed after use
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("database_session_error", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()


def init_db():
    """Initialize database tables"""
    # Register every model on the metadata before creating tables
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("database_initialized")
