"""
Pytest configuration.

Every test gets its own in-memory SQLite database; the API client overrides
the ``get_db`` and file storage dependencies to point at it.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import models  # noqa: F401
from app.core.config import settings
from app.core.dependencies import get_db
from app.db.base import Base
from app.main import app
from app.models.client import Client
from app.models.user import User
from app.schemas.mileage import MileageCreate
from app.schemas.shift import ShiftCreate
from app.services.file_storage import LocalFileStorage, get_file_storage
from app.services.mileage_service import create_mileage
from app.services.shift_service import create_shift


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "uploads")


def _make_user(db, email: str, **overrides) -> User:
    values = {
        "first_name": "Sam",
        "last_name": "Carer",
        "email": email,
        "hashed_password": "not-a-real-hash",
        "hourly_rate": 50.0,
        "hst_percentage": 13.0,
        "mileage_rate": 0.5,
    }
    values.update(overrides)

    user = User(**values)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return _make_user(db, "carer@example.com")


@pytest.fixture
def other_user(db):
    return _make_user(db, "someone.else@example.com")


@pytest.fixture
def client_record(db, user):
    client = Client(user_id=user.id, name="Maple House", address="12 Maple St")
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@pytest.fixture
def other_client_record(db, other_user):
    client = Client(user_id=other_user.id, name="Elm Court")
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@pytest.fixture
def make_shift(db, user, client_record):
    def _make(start: datetime, end: datetime, owner=None, client=None, **extra):
        owner = owner or user
        client = client or client_record
        return create_shift(
            db,
            owner.id,
            ShiftCreate(client_id=client.id, start_time=start, end_time=end, **extra),
        )

    return _make


@pytest.fixture
def make_mileage(db, user, client_record):
    def _make(when: datetime, distance: float, owner=None, client=None, **extra):
        owner = owner or user
        client = client or client_record
        return create_mileage(
            db,
            owner.id,
            MileageCreate(client_id=client.id, date=when, distance=distance, **extra),
        )

    return _make


@pytest.fixture
def api_client(session_factory, storage, tmp_path, monkeypatch):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr(settings, "EXPORTS_DIR", str(tmp_path / "exports"))

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(api_client):
    response = api_client.post(
        "/auth/register",
        json={
            "first_name": "Alex",
            "last_name": "Rivera",
            "email": "alex@example.com",
            "password": "secret123",
        },
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
