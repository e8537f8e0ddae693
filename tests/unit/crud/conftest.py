"""Shared fixtures for crud unit tests"""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from mdblog.core.utils.hashing import sha256
from mdblog.crud.models import Post


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="post")
def post_fixture(session):
    """A minimal Post persisted to the session."""
    p = Post(
        slug="event-loop",
        path="posts/event-loop.md",
        title="Debugging the event loop",
        date=datetime(2020, 11, 3),
        markdown="# Hello\n\nWorld",
        hash=sha256("# Hello\n\nWorld"),
        frontmatter={"title": "Debugging the event loop"},
    )
    session.add(p)
    session.flush()
    return p
