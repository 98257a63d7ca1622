"""
Initialize database tables and the default job board
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import SessionLocal, init_db
from app.core.logging_config import configure_logging
from app.models.board import JobBoard
import structlog

logger = structlog.get_logger()


def create_default_board(db: Session):
    """Create the default job board"""
    name = settings.DEFAULT_BOARD_NAME
    if not name:
        logger.info("default_board_disabled")
        return

    existing = db.query(JobBoard).filter(JobBoard.name == name).first()
    if existing:
        logger.info("board_exists", board=name, board_id=existing.id)
        return

    board = JobBoard(name=name, title=name.replace("-", " ").title(), active=True)
    db.add(board)
    db.commit()
    logger.info("board_created", board=name, board_id=board.id)


def main():
    """Main initialization function"""
    configure_logging()
    logger.info("initializing_database")

    # Initialize database tables
    init_db()

    db: Session = SessionLocal()
    try:
        create_default_board(db)
        logger.info("database_initialization_complete")
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
