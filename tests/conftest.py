"""Fixtures compartidos: base SQLite en memoria por test y cliente HTTP del API."""
import os

# Antes de importar la app: la URL por defecto apunta a Postgres
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from zone_api.database.database import Base, get_db
from zone_api.main import app
from zone_api.users.crud import create_user
from zone_api.users.security import create_token_for_user


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
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
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(email=None, password="secret123", name="Test User", username=None):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        username = username or email.split("@")[0]
        return create_user(db, email, password, name, username)

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user(email="owner@example.com")


@pytest.fixture
def other_user(make_user):
    return make_user(email="intruder@example.com")


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {create_token_for_user(user)}"}


@pytest.fixture
def auth_headers(user):
    return bearer(user)


@pytest.fixture
def other_headers(other_user):
    return bearer(other_user)


@pytest.fixture
def zone_data():
    """Datos de zona con los nombres de columna (capa de servicio)."""
    def _zone_data(**overrides):
        data = {
            "title": "Home",
            "address": "1600 Amphitheatre Pkwy",
            "location": "Mountain View, CA",
            "latitude": 37.4,
            "longitude": -122.1,
            "radius": 200.0,
            "icon": "house.fill",
            "color": "#4F46E5",
            "description": None,
            "notification_option": "both",
            "notification_text": "Welcome home",
            "image_url": None,
        }
        data.update(overrides)
        return data

    return _zone_data


@pytest.fixture
def zone_payload():
    """Cuerpo JSON de POST /api/zones (camelCase)."""
    def _zone_payload(**overrides):
        payload = {
            "title": "Home",
            "address": "1600 Amphitheatre Pkwy",
            "location": "Mountain View, CA",
            "latitude": 37.4,
            "longitude": -122.1,
            "radius": 200,
            "icon": "house.fill",
            "color": "#4F46E5",
            "notificationOption": "enter",
            "notificationText": "Welcome home",
        }
        payload.update(overrides)
        return payload

    return _zone_payload
