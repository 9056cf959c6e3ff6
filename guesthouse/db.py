import logging
import time
from typing import Callable, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker, DeclarativeBase
from .config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

class Base(DeclarativeBase):
    pass

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def with_retry(
    fn: Callable[[], T],
    db: Session | None = None,
    attempts: int | None = None,
    base_delay: float | None = None,
) -> T:
    """
    Call fn(), retrying on OperationalError (dropped connection, locked database, ...)
    with exponential backoff. The last error is re-raised once attempts are exhausted.

    When fn() reads through ``db``, pass the session: it is rolled back before each
    retry so an invalidated connection is replaced instead of failing with
    PendingRollbackError. Anything pending on the session is discarded by that rollback.
    """
    attempts = attempts if attempts is not None else settings.DB_RETRY_ATTEMPTS
    base_delay = base_delay if base_delay is not None else settings.DB_RETRY_BASE_DELAY
    attempt = 1
    while True:
        try:
            return fn()
        except OperationalError as e:
            if db is not None:
                db.rollback()
            if attempt >= attempts:
                logger.error("Store call failed after %d attempts: %s", attempt, e)
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning("Transient store error (attempt %d/%d), retrying in %.2fs: %s", attempt, attempts, delay, e)
            time.sleep(delay)
            attempt += 1


def ensure_mvp_schema():
    """
    Create missing tables and the indexes the reconciliation scan relies on.
    Used for development databases that are not managed by Alembic.
    """
    # Import models so every table is registered on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    with engine.begin() as conn:
        for idx in [
            "CREATE INDEX IF NOT EXISTS ix_guests_open_checkout ON guests(checked_out_at, check_out);",
        ]:
            conn.exec_driver_sql(idx)
