import csv
import io
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from facturo.app.core.security import get_password_hash
from facturo.app.db.base import Base
from facturo.app.db.session import SessionLocal, engine
from facturo.app.main import app
from facturo.app.models.company import Company
from facturo.app.models.user import Role, User
from facturo.app.services.exports import EBATCH_HEADER

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_user(email: str, role: Role, company_id: int, **fields) -> int:
    db = SessionLocal()
    try:
        user = User(
            email=email, hashed_password=get_password_hash(PASSWORD), role=role, company_id=company_id, **fields
        )
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def create_company() -> int:
    db = SessionLocal()
    try:
        company = Company(name="Acme")
        db.add(company)
        db.commit()
        return company.id
    finally:
        db.close()


def login(client: TestClient, email: str) -> dict:
    resp = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def billed_company():
    company_id = create_company()
    create_user("owner@example.com", Role.OWNER, company_id)
    client_id = create_user(
        "client@example.com",
        Role.CLIENT,
        company_id,
        name="Client Co",
        code="4101",
        address="1 rue de la Mer",
        zip_code="98800",
        city="Noumea",
    )
    client = TestClient(app)
    headers = login(client, "owner@example.com")
    item = {"product": "Service", "price": "100", "quantity": "1"}
    for doc_type, ref in (("invoice", "FAC-1"), ("devis", "DEV-1"), ("avoir", "AVR-1")):
        resp = client.post(
            "/api/invoices",
            json={"type": doc_type, "ref": ref, "client_id": client_id, "items": [item]},
            headers=headers,
        )
        assert resp.status_code == 201
    return client, headers


def test_ebatch_export_lists_only_invoices(billed_company):
    client, headers = billed_company
    resp = client.get("/api/exports/ebatch-csv", headers=headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "ebatch.csv" in resp.headers["content-disposition"]

    lines = resp.text.split("\n")
    assert lines[0] == ",".join(EBATCH_HEADER)
    rows = list(csv.reader(io.StringIO("\n".join(lines[1:]))))
    assert len(rows) == 1
    row = dict(zip(EBATCH_HEADER, rows[0]))
    assert row["DATE"] == datetime.now(timezone.utc).strftime("%d/%m/%Y")
    assert row["COMPTE"] == "411000"
    assert row["TIERS"] == "4101"
    assert row["JOURNAL"] == "FAC"
    assert row["PIECE"] == "FAC-1"
    assert float(row["MONTANT"]) == 100
    assert row["DC"] == "D"
    assert row["LIBELLE"] == "FACT Client Co"
    assert row["NOM"] == "Client Co"
    assert row["AD2"] == "98800 Noumea"
    assert row["TEL"] == "NULL"
    assert row["ADMAIL"] == "client@example.com"
    assert row["REPRES"] == "1"


def test_data_cells_are_quoted(billed_company):
    client, headers = billed_company
    data_line = client.get("/api/exports/ebatch-csv", headers=headers).text.split("\n")[1]
    assert data_line.startswith('"')
    assert '"411000"' in data_line


def test_date_range_filters_rows(billed_company):
    client, headers = billed_company
    today = datetime.now(timezone.utc).date()

    in_range = client.get(
        "/api/exports/ebatch-csv", params={"start": str(today - timedelta(days=1)), "end": str(today + timedelta(days=1))}, headers=headers
    )
    assert len(in_range.text.split("\n")) == 2

    future = client.get("/api/exports/ebatch-csv", params={"start": str(today + timedelta(days=1))}, headers=headers)
    assert future.text == ",".join(EBATCH_HEADER)


def test_reversed_range_is_rejected(billed_company):
    client, headers = billed_company
    resp = client.get(
        "/api/exports/ebatch-csv", params={"start": "2030-02-01", "end": "2030-01-01"}, headers=headers
    )
    assert resp.status_code == 400


@pytest.mark.parametrize("role", [Role.MANAGER, Role.EMPLOYEE, Role.CLIENT])
def test_export_restricted_to_management(role):
    company_id = create_company()
    create_user("someone@example.com", role, company_id)
    client = TestClient(app)
    resp = client.get("/api/exports/ebatch-csv", headers=login(client, "someone@example.com"))
    assert resp.status_code == 403
