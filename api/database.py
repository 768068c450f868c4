"""
Database engine and sessions for the compliance ledger.

SQLite (the default) and PostgreSQL are both supported; engine options
are chosen from the URL's backend.
"""
from contextlib import contextmanager
from typing import Any, Dict, Generator
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from api.config import settings

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Keyword arguments for create_engine() on the given database URL.

    SQLite gets no pool sizing. Connections may cross threads (the ledger
    lock serializes writers), and an in-memory database is pinned to a
    single shared connection so every session sees the same tables.
    Server databases keep a sized, pre-pinged connection pool.
    """
    url = make_url(database_url)
    options: Dict[str, Any] = {"echo": settings.db_echo}

    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options

    options.update(
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    return options


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session; stores commit their own writes."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Session scope for scripts and the CLI.

    Commits on a clean exit and rolls back if the block raises.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        logger.error(f"Ledger session rolled back: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def init_db():
    """Create the compliance, banking, pool and route tables if missing."""
    import api.models  # noqa: F401  register models on Base

    logger.info(f"Creating ledger tables on {engine.url.get_backend_name()}")
    Base.metadata.create_all(bind=engine)
