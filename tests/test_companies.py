import pytest
from fastapi.testclient import TestClient

from facturo.app.core.security import get_password_hash
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


def create_user(email: str, role: Role, company_name: str | None = None) -> int:
    db = SessionLocal()
    try:
        company_id = None
        if company_name:
            company = Company(name=company_name)
            db.add(company)
            db.flush()
            company_id = company.id
        user = User(email=email, hashed_password=get_password_hash(PASSWORD), role=role, company_id=company_id)
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def login(client: TestClient, email: str) -> dict:
    resp = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def super_admin_headers(client: TestClient) -> dict:
    create_user("root@example.com", Role.SUPER_ADMIN)
    return login(client, "root@example.com")


def test_super_admin_creates_and_lists_companies():
    client = TestClient(app)
    headers = super_admin_headers(client)

    resp = client.post("/api/companies", json={"name": "Blue Lagoon", "city": "Noumea"}, headers=headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Blue Lagoon"
    assert body["city"] == "Noumea"
    assert body["user_count"] == 0

    listing = client.get("/api/companies", headers=headers)
    assert listing.status_code == 200
    assert [c["name"] for c in listing.json()] == ["Blue Lagoon"]


def test_company_name_is_required():
    client = TestClient(app)
    headers = super_admin_headers(client)
    resp = client.post("/api/companies", json={"city": "Noumea"}, headers=headers)
    assert resp.status_code == 400
    assert client.get("/api/companies", headers=headers).json() == []


@pytest.mark.parametrize("role", [Role.OWNER, Role.ADMIN, Role.EMPLOYEE, Role.CLIENT])
def test_tenant_roles_cannot_manage_companies(role):
    client = TestClient(app)
    create_user("member@example.com", role, company_name="Acme")
    headers = login(client, "member@example.com")

    assert client.get("/api/companies", headers=headers).status_code == 403
    resp = client.post("/api/companies", json={"name": "Other"}, headers=headers)
    assert resp.status_code == 403
    assert "error" in resp.json()


def test_user_count_reflects_members():
    client = TestClient(app)
    headers = super_admin_headers(client)
    company_id = client.post("/api/companies", json={"name": "Acme"}, headers=headers).json()["id"]

    for email in ("a@example.com", "b@example.com"):
        resp = client.post(
            "/api/users",
            json={"name": "Member", "email": email, "password": PASSWORD, "role": "EMPLOYEE", "company_id": company_id},
            headers=headers,
        )
        assert resp.status_code == 201

    resp = client.get(f"/api/companies/{company_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["user_count"] == 2


def test_update_replaces_company_fields():
    client = TestClient(app)
    headers = super_admin_headers(client)
    company_id = client.post(
        "/api/companies", json={"name": "Acme", "city": "Noumea", "phone": "123"}, headers=headers
    ).json()["id"]

    resp = client.put(f"/api/companies/{company_id}", json={"name": "Acme Pacific", "city": "Kone"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Acme Pacific"
    assert body["city"] == "Kone"
    assert body["phone"] is None


def test_delete_company_refused_while_users_exist():
    client = TestClient(app)
    headers = super_admin_headers(client)
    company_id = client.post("/api/companies", json={"name": "Acme"}, headers=headers).json()["id"]
    client.post(
        "/api/users",
        json={"name": "Member", "email": "m@example.com", "password": PASSWORD, "role": "OWNER", "company_id": company_id},
        headers=headers,
    )

    resp = client.delete(f"/api/companies/{company_id}", headers=headers)
    assert resp.status_code == 400
    assert client.get(f"/api/companies/{company_id}", headers=headers).status_code == 200


def test_delete_empty_company_then_missing():
    client = TestClient(app)
    headers = super_admin_headers(client)
    company_id = client.post("/api/companies", json={"name": "Acme"}, headers=headers).json()["id"]

    resp = client.delete(f"/api/companies/{company_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["message"]

    assert client.delete(f"/api/companies/{company_id}", headers=headers).status_code == 404
    missing = client.get("/api/companies/999", headers=headers)
    assert missing.status_code == 404
    assert missing.json() == {"error": "Company not found"}
