# tests/conftest.py
import os

# settings are read at import time; point them at a throwaway in-memory store
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
from fastapi.testclient import TestClient

from chatrelay.app.database.session import Base, SessionLocal, engine
from chatrelay.app.main import app


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(client):
    def _make_user(**overrides):
        body = {"name": "Ana", "username": "ana1", "password": "x"}
        body.update(overrides)
        resp = client.post("/users", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make_user
