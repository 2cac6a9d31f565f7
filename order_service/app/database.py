import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL
from .errors import StoreError

logger = logging.getLogger(__name__)

# Base class for declarative ORM models.
Base = declarative_base()


def make_engine(url, **kwargs):
    """Create the SQLAlchemy engine, enforcing foreign keys on SQLite."""
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_session_factory(engine):
    """Create a configured "Session" class bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Process-wide engine and session factory; the app owns their lifecycle.
engine = make_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = make_session_factory(engine)


@contextmanager
def transaction(session_factory):
    """
    Run the enclosed statements as one transaction.

    Commits when the block exits normally, rolls back on any exception and
    always closes the session. Database failures surface as StoreError.
    """
    session = session_factory()
    logger.debug("Opened session %s", id(session))
    try:
        yield session
        session.commit()
        logger.debug("Committed session %s", id(session))
    except SQLAlchemyError as e:
        _rollback(session)
        raise StoreError(str(e)) from e
    except Exception:
        _rollback(session)
        raise
    finally:
        session.close()
        logger.debug("Closed session %s", id(session))


@contextmanager
def read_session(session_factory):
    """Scoped session for read-only work; closes on every exit path."""
    session = session_factory()
    try:
        yield session
    except SQLAlchemyError as e:
        raise StoreError(str(e)) from e
    finally:
        session.close()


def _rollback(session):
    logger.debug("Rolling back session %s", id(session))
    try:
        session.rollback()
    except SQLAlchemyError as e:
        logger.error("Rollback failed for session %s: %s", id(session), e)
        raise StoreError(f"Rollback failed: {e}") from e
