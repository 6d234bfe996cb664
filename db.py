# db.py
# Role: Database bootstrap for the ledger.
#       Builds the SQLAlchemy engine and session factory, and declares the ORM Base.
#       Foreign keys are switched on for every SQLite connection.

"""
Database setup for the ledger.

- The application engine uses config.DATABASE_URL.
- make_engine / make_session_factory let tests (and scripts) build their own
  store, e.g. an in-memory SQLite database.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

import config

# Declarative base class for ORM models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given SQLAlchemy URL.

    For SQLite we need check_same_thread=False for FastAPI (threaded request
    handling). An in-memory database ("sqlite://") is pinned to a single
    connection, otherwise every new connection would see an empty database.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool

    engine = create_engine(url, echo=echo, **kwargs)
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_db(engine: Engine) -> None:
    """Create tables (only if they don't exist yet)."""
    import models  # noqa: F401  (registers the tables on Base.metadata)

    Base.metadata.create_all(bind=engine)


# Process-wide engine and session factory used via app/deps.py:get_db
engine = make_engine(config.DATABASE_URL, echo=config.SQL_ECHO)
SessionLocal = make_session_factory(engine)
