"""Shared fixtures: app on in-memory SQLite, test client, user factory, login helpers."""

from __future__ import annotations

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.user import User
from security.password import hash_password

ADMIN_EMAIL = "admin@terramail.com"
ADMIN_PASSWORD = "admin123"
USER_PASSWORD = "secret123"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Insert a user row directly."""

    def _make(email="user@terramail.com", password=USER_PASSWORD, **fields):
        user = User(
            name=fields.pop("name", "Test User"),
            email=email.lower(),
            password_hash=hash_password(password),
            role=fields.pop("role", "user"),
            subscription_days=fields.pop("subscription_days", 30),
            allowed_ips=fields.pop("allowed_ips", []),
            is_banned=fields.pop("is_banned", False),
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


def login(client, email, password, ip="203.0.113.10"):
    return client.post(
        "/auth/login",
        json={"email": email, "password": password},
        headers={"X-Forwarded-For": ip},
    )


def csrf_headers(client) -> dict:
    cookie = client.get_cookie("csrf_token")
    return {"X-CSRF-Token": cookie.value if cookie else ""}


@pytest.fixture
def admin_client(client):
    resp = login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert resp.status_code == 200, resp.get_json()
    return client


@pytest.fixture
def user_client(client, make_user):
    make_user()
    resp = login(client, "user@terramail.com", USER_PASSWORD)
    assert resp.status_code == 200, resp.get_json()
    return client
