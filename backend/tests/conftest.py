"""Shared fixtures: a file-backed SQLite store per test."""

import pytest
from fastapi.testclient import TestClient

from app.database import StudentStore
from app.main import create_app
from app.services.students import StudentService


@pytest.fixture
def database_url(tmp_path):
    return "sqlite:///{}".format(tmp_path / "students.db")


@pytest.fixture
def store(database_url):
    store = StudentStore(database_url)
    assert store.open()
    yield store
    store.close()


@pytest.fixture
def service(store):
    return StudentService(store)


@pytest.fixture
def client(database_url):
    app = create_app(StudentStore(database_url))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def offline_client():
    """Client for an app whose DATABASE_URL was never configured."""
    app = create_app(StudentStore(None))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def lakshya():
    return {"firstName": "Lakshya", "lastName": "Kumar", "age": 20, "country": "India"}
