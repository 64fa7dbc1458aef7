import pytest
from fastapi.testclient import TestClient

from facturo.app.core.security import create_access_token, get_password_hash
from facturo.app.db.base import Base
from facturo.app.db.session import SessionLocal, engine
from facturo.app.main import app
from facturo.app.models.company import Company
from facturo.app.models.user import Role, User

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_user(email: str, role: Role = Role.OWNER, with_company: bool = True, is_active: bool = True) -> int:
    db = SessionLocal()
    try:
        company_id = None
        if with_company:
            company = Company(name="Acme")
            db.add(company)
            db.flush()
            company_id = company.id
        user = User(
            email=email,
            hashed_password=get_password_hash(PASSWORD),
            role=role,
            company_id=company_id,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def test_login_returns_bearer_token():
    client = TestClient(app)
    create_user("owner@example.com")
    resp = client.post("/api/auth/login", json={"email": "owner@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]


def test_login_is_case_insensitive_on_email():
    client = TestClient(app)
    create_user("owner@example.com")
    resp = client.post("/api/auth/login", json={"email": "Owner@Example.com", "password": PASSWORD})
    assert resp.status_code == 200


def test_login_wrong_password_is_400_with_error_envelope():
    client = TestClient(app)
    create_user("owner@example.com")
    resp = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "nope"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid credentials"}


def test_inactive_user_cannot_login():
    client = TestClient(app)
    create_user("sleepy@example.com", is_active=False)
    resp = client.post("/api/auth/login", json={"email": "sleepy@example.com", "password": PASSWORD})
    assert resp.status_code == 400
    assert resp.json()["error"] == "User is inactive"


def test_me_returns_principal():
    client = TestClient(app)
    user_id = create_user("owner@example.com", role=Role.ADMIN)
    token = client.post("/api/auth/login", json={"email": "owner@example.com", "password": PASSWORD}).json()["access_token"]
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == user_id
    assert data["role"] == "ADMIN"
    assert data["company_id"] is not None
    assert "hashed_password" not in data


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/api/auth/me"),
        ("get", "/api/companies"),
        ("get", "/api/company"),
        ("get", "/api/users"),
        ("get", "/api/tax"),
        ("get", "/api/tax/1"),
        ("delete", "/api/tax/1"),
        ("get", "/api/groups"),
        ("get", "/api/invoices"),
        ("get", "/api/invoices/1"),
        ("get", "/api/transfers"),
        ("get", "/api/exports/ebatch-csv"),
        ("post", "/api/imports/invoices"),
    ],
)
def test_protected_routes_require_authentication(method, path):
    client = TestClient(app)
    resp = getattr(client, method)(path)
    assert resp.status_code == 401
    assert resp.json() == {"error": "Not authenticated"}


def test_garbage_and_expired_tokens_are_rejected():
    client = TestClient(app)
    user_id = create_user("owner@example.com")
    expired = create_access_token(user_id=user_id, expires_minutes=-1)
    assert client.get("/api/tax", headers={"Authorization": f"Bearer {expired}"}).status_code == 401
    assert client.get("/api/tax", headers={"Authorization": "Bearer not-a-token"}).status_code == 401
    assert client.get("/api/tax", headers={"Authorization": "Basic abc"}).status_code == 401


def test_token_of_deleted_user_is_rejected():
    client = TestClient(app)
    token = create_access_token(user_id=999)
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_deactivated_user_token_stops_working():
    client = TestClient(app)
    user_id = create_user("owner@example.com")
    token = create_access_token(user_id=user_id)
    db = SessionLocal()
    try:
        db.query(User).filter(User.id == user_id).update({"is_active": False})
        db.commit()
    finally:
        db.close()
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401
