"""Shared test fixtures for the QR badge API."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from qrbadge.config import config
from qrbadge.database import DatabaseManager
from qrbadge.main import create_app
from qrbadge.services import AccessService, AuthService, BadgeService, UserService
from qrbadge.utils.validators import utcnow

JWT_SECRET = "test-jwt-secret"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-password"


@pytest.fixture
def db():
    """Fresh in-memory database per test."""
    manager = DatabaseManager("sqlite://")
    manager.create_all()
    yield manager
    manager.dispose()


@pytest.fixture
def auth():
    return AuthService(secret=JWT_SECRET, algorithm="HS256", expire_hours=24)


@pytest.fixture
def badge_service(db):
    return BadgeService(db)


@pytest.fixture
def access_service(db):
    return AccessService(db)


@pytest.fixture
def user_service(db, auth):
    return UserService(db, auth)


@pytest.fixture
def future_ceiling(monkeypatch):
    """Move the event end into the future so fresh badges are usable."""
    ceiling = (utcnow() + timedelta(days=30)).replace(microsecond=0)
    monkeypatch.setattr(config, "BADGE_EXPIRATION_CEILING", ceiling)
    return ceiling


@pytest.fixture
def app(db, auth):
    return create_app(db=db, auth=auth)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(user_service):
    return user_service.create_user("Admin", ADMIN_EMAIL, ADMIN_PASSWORD, "admin")


@pytest.fixture
def admin_headers(admin, auth):
    return {"Authorization": f"Bearer {auth.create_token(admin.id, admin.role)}"}
