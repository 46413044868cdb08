import os

# Must be set before api_spoticfy.config is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from api_spoticfy.config.config import Base, build_engine, build_session_factory
from init_data import seed
from main import create_app


@pytest.fixture
def engine():
    """In-memory SQLite engine with the catalog tables created."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = build_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def catalogo(db):
    """Artists Lean and Nacho, three albums and three songs (ids start at 1)."""
    seed(db)
    return db


@pytest.fixture
def client(engine, catalogo):
    with TestClient(create_app(engine)) as client:
        yield client
