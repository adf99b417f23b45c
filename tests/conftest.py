# tests/conftest.py
# Общие фикстуры: in-memory SQLite на каждый тест, подмена get_db, TestClient.

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from cocopik.db import Base, get_db, make_engine
from cocopik.main import app


@pytest.fixture
def engine():
    engine = make_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def create_group(client):
    """Хелпер: POST /api/groups с разумными значениями по умолчанию."""
    def _create(device_token="device-creator", model_id="m1", **extra):
        body = {"deviceToken": device_token, "modelId": model_id, **extra}
        resp = client.post("/api/groups", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
