# disruption_engine/db/engine.py
"""
Database engine and session management.

SQLite by default, PostgreSQL through DATABASE_URL. The default engine is
built lazily on first use so importing the package has no side effects.
"""

import os
from contextlib import contextmanager
from typing import Callable, Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool

from ..settings import settings

# Base class for ORM models
Base = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for `database_url`.

    In-memory SQLite gets a StaticPool so every session shares the one
    connection that holds the data.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        database = url.database or ""
        if database in ("", ":memory:"):
            return create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        directory = os.path.dirname(os.path.abspath(database))
        os.makedirs(directory, exist_ok=True)
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,  # Check connection health
        pool_size=10,
        max_overflow=20,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to `engine`."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def get_engine() -> Engine:
    """Get the process-wide engine, building it on first call."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings.database_url)
    return _engine


def get_session_factory() -> sessionmaker:
    """Get the process-wide session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = make_session_factory(get_engine())
    return _session_factory


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet."""
    # Register models on Base.metadata
    from ..network import models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


@contextmanager
def session_scope(
    factory: Optional[Callable[[], Session]] = None,
) -> Generator[Session, None, None]:
    """
    Transactional scope: commit on success, roll back on any exception.

    Usage:
        with session_scope() as session:
            session.add(flight)
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_connection(engine: Optional[Engine] = None) -> bool:
    """
    Check database connection.

    Returns:
        True if connection successful
    """
    try:
        with (engine or get_engine()).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
