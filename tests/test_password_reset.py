from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from facturo.app.core.security import get_password_hash, hash_reset_token
from facturo.app.core.time import ensure_aware, utc_now
from facturo.app.db.base import Base
from facturo.app.db.session import SessionLocal, engine
from facturo.app.main import app
from facturo.app.models.company import Company
from facturo.app.models.user import Role, User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_user(email: str, password: str = "secret123") -> int:
    db = SessionLocal()
    try:
        company = Company(name="Acme")
        db.add(company)
        db.flush()
        user = User(email=email, hashed_password=get_password_hash(password), role=Role.EMPLOYEE, company_id=company.id)
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def load_user(user_id: int) -> User:
    db = SessionLocal()
    try:
        return db.query(User).filter(User.id == user_id).first()
    finally:
        db.close()


def request_reset(client: TestClient, email: str) -> str:
    resp = client.post("/api/auth/forgot-password", json={"email": email})
    assert resp.status_code == 200
    reset_url = resp.json()["reset_url"]
    return parse_qs(urlparse(reset_url).query)["token"][0]


def test_unknown_email_returns_404():
    client = TestClient(app)
    resp = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found"}


def test_missing_email_returns_400():
    client = TestClient(app)
    resp = client.post("/api/auth/forgot-password", json={})
    assert resp.status_code == 400
    assert isinstance(resp.json()["error"], list)


def test_known_email_stores_only_token_hash_with_one_hour_expiry():
    client = TestClient(app)
    user_id = create_user("worker@example.com")

    before = utc_now()
    resp = client.post("/api/auth/forgot-password", json={"email": "Worker@Example.com"})
    after = utc_now()
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"]
    token = parse_qs(urlparse(body["reset_url"]).query)["token"][0]
    assert body["reset_url"].startswith("http://localhost:3000/reset-password?token=")

    user = load_user(user_id)
    assert user.reset_token_hash == hash_reset_token(token)
    assert user.reset_token_hash != token
    expires_at = ensure_aware(user.reset_token_expires_at)
    assert before + timedelta(seconds=3600) - timedelta(seconds=1) <= expires_at
    assert expires_at <= after + timedelta(seconds=3600) + timedelta(seconds=1)


def test_reset_password_changes_password_and_burns_token():
    client = TestClient(app)
    create_user("worker@example.com", password="oldpassword")
    token = request_reset(client, "worker@example.com")

    resp = client.post("/api/auth/reset-password", json={"token": token, "password": "brand-new-pass"})
    assert resp.status_code == 200

    assert client.post("/api/auth/login", json={"email": "worker@example.com", "password": "oldpassword"}).status_code == 400
    assert client.post("/api/auth/login", json={"email": "worker@example.com", "password": "brand-new-pass"}).status_code == 200

    again = client.post("/api/auth/reset-password", json={"token": token, "password": "another-pass"})
    assert again.status_code == 400


def test_reset_with_wrong_token_is_rejected():
    client = TestClient(app)
    create_user("worker@example.com")
    request_reset(client, "worker@example.com")
    resp = client.post("/api/auth/reset-password", json={"token": "0" * 64, "password": "brand-new-pass"})
    assert resp.status_code == 400


def test_expired_token_is_rejected():
    client = TestClient(app)
    user_id = create_user("worker@example.com")
    token = request_reset(client, "worker@example.com")

    db = SessionLocal()
    try:
        db.query(User).filter(User.id == user_id).update({"reset_token_expires_at": utc_now() - timedelta(minutes=1)})
        db.commit()
    finally:
        db.close()

    resp = client.post("/api/auth/reset-password", json={"token": token, "password": "brand-new-pass"})
    assert resp.status_code == 400
    assert load_user(user_id).reset_token_hash is None


def test_short_password_is_rejected():
    client = TestClient(app)
    create_user("worker@example.com")
    token = request_reset(client, "worker@example.com")
    resp = client.post("/api/auth/reset-password", json={"token": token, "password": "short"})
    assert resp.status_code == 400
