"""eBatch CSV import, the counterpart of the accounting export.

Each row becomes an invoice of the importing company. Clients are matched by
email or created on the fly. Rows whose reference already exists in the
company (or earlier in the same file) are skipped, so re-importing a file is
harmless.
"""

import csv
import io
import secrets
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from facturo.app.core.errors import ValidationError
from facturo.app.core.logger import logger
from facturo.app.core.security import get_password_hash
from facturo.app.db.session import transaction
from facturo.app.models.invoice import Invoice
from facturo.app.models.invoice_item import InvoiceItem
from facturo.app.models.user import Role, User
from facturo.app.services.billing import CENT, apply_items
from facturo.app.services.exports import NULL

REQUIRED_COLUMNS = ("PIECE", "NOM")
IMPORTED_EMAIL_DOMAIN = "import.facturo.app"
IMPORTED_ITEM_LABEL = "Import eBatch"

_email_adapter = TypeAdapter(EmailStr)


def _cell(row: dict, column: str) -> str:
    value = (row.get(column) or "").strip()
    return "" if value == NULL else value


def parse_export_date(value: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value, "%d/%m/%Y").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_amount(value: str) -> Optional[Decimal]:
    """MONTANT as written by the export (a comma decimal separator is accepted). None when unusable."""
    if not value:
        return Decimal("0.00")
    try:
        amount = Decimal(value.replace(",", "."))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_email(value: str) -> Optional[str]:
    if not value:
        return None
    try:
        return _email_adapter.validate_python(value).lower()
    except SchemaValidationError:
        return None


def read_ebatch_rows(content: bytes) -> list[dict]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("File must be a UTF-8 encoded CSV")
    reader = csv.DictReader(io.StringIO(text))
    try:
        rows = list(reader)
    except csv.Error as exc:
        raise ValidationError(f"CSV parse error: {exc}")
    missing = [column for column in REQUIRED_COLUMNS if column not in (reader.fieldnames or [])]
    if missing:
        raise ValidationError(f"CSV header is missing columns: {', '.join(missing)}")
    return rows


def _split_locality(value: str) -> tuple[Optional[str], Optional[str]]:
    # The export writes "<zip> <city>"
    zip_code, _, city = value.partition(" ")
    if zip_code.isdigit():
        return zip_code, city or None
    return None, value or None


def _find_or_create_client(
    db: Session, company_id: int, row: dict, clients: Dict[str, User]
) -> Optional[User]:
    email = normalize_email(_cell(row, "ADMAIL"))
    if email in clients:
        return clients[email]
    if email:
        existing = db.query(User).filter(User.email == email).first()
        if existing is not None:
            # An address owned by another tenant, or by staff, cannot be billed here
            if existing.company_id != company_id or existing.role != Role.CLIENT:
                return None
            clients[email] = existing
            return existing

    zip_code, city = _split_locality(_cell(row, "AD2"))
    tiers = _cell(row, "TIERS")
    code_taken = tiers and db.query(User.id).filter(User.company_id == company_id, User.code == tiers).first()
    client = User(
        name=_cell(row, "NOM"),
        email=email or f"import-{secrets.token_hex(8)}@{IMPORTED_EMAIL_DOMAIN}",
        # Imported clients sign in through the password reset flow
        hashed_password=get_password_hash(secrets.token_urlsafe(24)),
        role=Role.CLIENT,
        is_active=True,
        company_id=company_id,
        address=_cell(row, "AD1") or None,
        zip_code=zip_code,
        city=city,
        phone=_cell(row, "TEL") or None,
        code=None if code_taken else (tiers or None),
    )
    db.add(client)
    db.flush()
    if email:
        clients[email] = client
    return client


def import_ebatch_invoices(db: Session, content: bytes, *, company_id: int, issued_by: User) -> dict:
    """Create one invoice per usable row, all in a single transaction."""
    rows = read_ebatch_rows(content)
    known_refs = {ref for (ref,) in db.query(Invoice.ref).filter(Invoice.company_id == company_id)}
    clients: Dict[str, User] = {}
    created = 0
    skipped = 0

    with transaction(db):
        for line, row in enumerate(rows, start=2):
            ref = _cell(row, "PIECE")
            amount = parse_amount(_cell(row, "MONTANT"))
            if not ref or not _cell(row, "NOM") or amount is None or len(ref) > 50:
                logger.info(f"eBatch import: line {line} skipped (incomplete row)")
                skipped += 1
                continue
            if ref in known_refs:
                skipped += 1
                continue

            client = _find_or_create_client(db, company_id, row, clients)
            if client is None:
                logger.info(f"eBatch import: line {line} skipped (email belongs to another account)")
                skipped += 1
                continue

            label = _cell(row, "LIBELLE")[:255]
            invoice = Invoice(
                ref=ref,
                type="invoice",
                wording=label or None,
                client_id=client.id,
                employee_id=issued_by.id,
                company_id=company_id,
                created_at=parse_export_date(_cell(row, "DATE")) or datetime.now(timezone.utc),
            )
            # The export carries only the amount due; it becomes a single untaxed line
            apply_items(invoice, [InvoiceItem(product=label or IMPORTED_ITEM_LABEL, price=amount, quantity=1, discount=0, tax=0)])
            db.add(invoice)
            known_refs.add(ref)
            created += 1

    logger.info(f"eBatch import for company {company_id}: {created} created, {skipped} skipped")
    return {"created": created, "skipped": skipped, "total": len(rows)}
