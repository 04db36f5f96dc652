"""Shared fixtures: temporary database, upload storage and API client."""

import tempfile
from pathlib import Path

import pytest
import requests

from simplo_pages.accounts import AccountService
from simplo_pages.notifications import EmailChannel, LeadNotifier
from simplo_pages.storage import Database, FileStorage

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class FakeResponse:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Records outbound POSTs instead of calling the email API."""

    def __init__(self, status_codes=None):
        self.calls = []
        self.status_codes = list(status_codes or [])

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        status = self.status_codes.pop(0) if self.status_codes else 200
        return FakeResponse(status)


@pytest.fixture
def temp_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db(temp_dir):
    return Database(temp_dir / "simplo.db")


@pytest.fixture
def files(temp_dir):
    return FileStorage(temp_dir / "uploads", "http://testserver")


@pytest.fixture
def email_session():
    return FakeSession()


@pytest.fixture
def notifier(email_session):
    email = EmailChannel("re_test_key", session=email_session, sleep=lambda s: None)
    return LeadNotifier(email=email)


@pytest.fixture
def user(db):
    return AccountService(db).register("owner@example.com", "secret123", name="Owner")


@pytest.fixture
def other_user(db):
    return AccountService(db).register("other@example.com", "secret123")


@pytest.fixture
def app(db, files, notifier):
    from simplo_pages.api.main import create_app
    return create_app(db=db, files=files, notifier=notifier)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def auth_headers(client, user):
    response = client.post("/auth/login", json={"email": "owner@example.com", "password": "secret123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
