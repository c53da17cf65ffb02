"""Shared fixtures for crud unit tests"""

import pytest
from sqlmodel import Session, SQLModel

from contentidx.crud.database import init_db, make_engine


@pytest.fixture(name="db")
def db_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(db):
    """Fresh session per test; changes are not committed."""
    with Session(db) as s:
        yield s
