"""Engine, session factory and schema setup for the ledger store."""

from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from finledger.config.settings import get_settings

Base = declarative_base()

# Built from settings on first use; reset_database() drops both
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_session_factory() -> sessionmaker:
    """Return the process-wide session factory for the configured database."""
    global _engine, _session_factory
    if _session_factory is None:
        database_url = get_settings().get_database_url()
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        _engine = create_engine(database_url, connect_args=connect_args)
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _session_factory


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def get_session() -> Session:
    return get_session_factory()()


def init_db() -> None:
    """Create the ledger tables if they are missing."""
    from finledger.repositories.sqlalchemy import orm_models  # noqa: F401

    get_session_factory()
    Base.metadata.create_all(bind=_engine)


def reset_database() -> None:
    """Dispose the engine so the next use follows the current settings."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
