"""
Shared fixtures: a fresh in-memory SQLite ledger per test, and a TestClient
wired to it.
"""

import os

# Must be set before `config` / `db` are imported anywhere
os.environ.setdefault("LEDGER_DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from db import init_db, make_engine, make_session_factory
from app.services.store import create_account, create_tag


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def checking(db):
    return create_account(db, "Checking")


@pytest.fixture
def savings(db):
    return create_account(db, "Savings")


@pytest.fixture
def food(db):
    return create_tag(db, "Food")


@pytest.fixture
def rent(db):
    return create_tag(db, "Rent")


@pytest.fixture
def ts():
    """Build a naive UTC timestamp."""

    def _ts(*args):
        return datetime(*args)

    return _ts


@pytest.fixture
def client(session_factory):
    from main import app
    from app.deps import get_db

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
