import os
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from backend import app as app_module
from backend.db import SessionLocal, init_db
from backend.db_models import TaxReturnORM, UserORM
from backend.deps import DEMO_USER_EMAIL
from backend.security import create_access_token, decode_token

os.environ["AUTH_BYPASS"] = "false"

client = TestClient(app_module.app)


def _auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def setup_db():
    os.environ["AUTH_BYPASS"] = "false"
    init_db()
    yield
    os.environ["AUTH_BYPASS"] = "false"
    with SessionLocal() as db:
        db.query(TaxReturnORM).delete()
        db.query(UserORM).delete()
        db.commit()


def test_register_login_and_me():
    resp = client.post("/auth/register", json={"email": "Filer@Example.com", "password": "secret", "full_name": "Filer"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    me = client.get("/auth/me", headers=_auth_header(token))
    assert me.status_code == 200
    assert me.json()["email"] == "filer@example.com"
    assert me.json()["is_active"] is True

    login = client.post("/auth/login", json={"email": "filer@example.com", "password": "secret"})
    assert login.status_code == 200
    assert decode_token(login.json()["access_token"])["email"] == "filer@example.com"

    bad_login = client.post("/auth/login", json={"email": "filer@example.com", "password": "wrong"})
    assert bad_login.status_code == 401

    duplicate = client.post("/auth/register", json={"email": "filer@example.com", "password": "secret"})
    assert duplicate.status_code == 400


def test_missing_and_invalid_tokens_are_rejected(monkeypatch):
    monkeypatch.delenv("FIREBASE_PROJECT_ID", raising=False)
    assert client.get("/auth/me").status_code == 401

    resp = client.get("/auth/me", headers=_auth_header("not-a-jwt"))
    assert resp.status_code == 401
    assert resp.headers.get("www-authenticate") == "Bearer"


def test_expired_token_is_rejected(monkeypatch):
    monkeypatch.delenv("FIREBASE_PROJECT_ID", raising=False)
    client.post("/auth/register", json={"email": "late@example.com", "password": "secret"})
    with SessionLocal() as db:
        user = db.query(UserORM).filter(UserORM.email == "late@example.com").first()
        token = create_access_token(user.id, user.email, expires_delta=timedelta(minutes=-5))
    assert client.get("/auth/me", headers=_auth_header(token)).status_code == 401


def test_auth_bypass_uses_demo_user():
    os.environ["AUTH_BYPASS"] = "true"
    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == DEMO_USER_EMAIL

    created = client.post("/api/tax-returns", json={"tax_year": 2024, "first_name": "Demo", "last_name": "User"})
    assert created.status_code == 201
    assert created.json()["filing_status"] == "single"


def test_health():
    assert client.get("/health").json() == {"status": "ok"}
