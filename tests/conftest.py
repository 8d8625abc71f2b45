import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import schemas
from database import init_db


def _memory_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine, sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def session_factory():
    engine, factory = _memory_session_factory()
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def other_db():
    """A second, empty store."""
    engine, factory = _memory_session_factory()
    with factory() as session:
        yield session
    engine.dispose()


@pytest.fixture
def mock_client():
    clients = []

    def _make(handler):
        client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
        clients.append(client)
        return client

    yield _make
    for c in clients:
        c.close()


def make_book(title="The Hobbit", author="J.R.R. Tolkien", total_pages=310, current_page=0, **kw):
    return schemas.BookCreate(
        title=title, author=author, total_pages=total_pages, current_page=current_page, **kw
    )
