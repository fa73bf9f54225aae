"""
SQLAlchemy engine, session and base. The database URL always comes from
the caller's configuration.
"""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(db_url: str) -> Engine:
    """Create an engine; SQLite files get their parent directory and thread access."""
    url = make_url(db_url)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        # Workers share the engine from pool threads.
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
    return create_engine(db_url, echo=False, future=True, pool_pre_ping=True, connect_args=connect_args)


def init_db(db_url: str, *, create_tables: bool = True) -> sessionmaker:
    """
    Initialize the engine and return a session factory bound to it.
    create_tables: issue CREATE TABLE for missing tables (no migrations).
    """
    engine = create_db_engine(db_url)
    if create_tables:
        from . import models as _models  # noqa: F401

        Base.metadata.create_all(engine)
    logger.debug("Database initialized at %s", engine.url.render_as_string(hide_password=True))
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for a single DB session. Commits on success, rolls back on error."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
