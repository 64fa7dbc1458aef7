"""Billing service utilities: totals, references and invoice writes."""

import random
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from sqlalchemy.orm import Session

from facturo.app.core.errors import ValidationError
from facturo.app.core.logger import logger
from facturo.app.db.session import transaction
from facturo.app.models.group import Group
from facturo.app.models.invoice import Invoice
from facturo.app.models.invoice_item import InvoiceItem
from facturo.app.models.tax import Tax
from facturo.app.models.user import Role, User
from facturo.app.schemas.invoice import InvoiceCreate, InvoiceItemCreate, InvoiceUpdate

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

REF_PREFIXES = {
    "invoice": "INV",
    "avoir": "AVR",
    "devis": "DEV",
}


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_line_totals(price, quantity, discount=0, tax=0) -> tuple[Decimal, Decimal]:
    """Return (amount excluding tax, amount including tax) for one line, unrounded."""
    line_ht = Decimal(str(price)) * Decimal(str(quantity)) * (1 - Decimal(str(discount or 0)) / HUNDRED)
    line_ttc = line_ht * (1 + Decimal(str(tax or 0)) / HUNDRED)
    return line_ht, line_ttc


def calculate_invoice_totals(items: Iterable) -> tuple[Decimal, Decimal]:
    """Sum line totals for anything exposing price/quantity/discount/tax; round once at the end."""
    total_ht = Decimal("0")
    total = Decimal("0")
    for item in items:
        line_ht, line_ttc = calculate_line_totals(item.price, item.quantity, item.discount, item.tax)
        total_ht += line_ht
        total += line_ttc
    return _quantize(total_ht), _quantize(total)


def generate_ref(prefix: str = "INV", now: datetime | None = None) -> str:
    current = now or datetime.now(timezone.utc)
    return f"{prefix}-{current.year}{current.month:02d}-{random.randint(0, 9999):04d}"


def _ref_taken(db: Session, company_id: int, ref: str, exclude_id: int | None = None) -> bool:
    query = db.query(Invoice.id).filter(Invoice.company_id == company_id, Invoice.ref == ref)
    if exclude_id is not None:
        query = query.filter(Invoice.id != exclude_id)
    return query.first() is not None


def next_invoice_ref(db: Session, company_id: int, invoice_type: str) -> str:
    prefix = REF_PREFIXES.get(invoice_type, "INV")
    ref = generate_ref(prefix)
    while _ref_taken(db, company_id, ref):
        ref = generate_ref(prefix)
    return ref


def check_item_taxes(db: Session, items: List[InvoiceItemCreate]) -> None:
    """Item rates are snapshots, but must match a configured Tax when written."""
    known = {round(t.percent, 4) for t in db.query(Tax).all()}
    known.add(0.0)
    for index, item in enumerate(items):
        if round(item.tax, 4) not in known:
            raise ValidationError(f"items.{index}.tax: {item.tax} does not match any configured tax rate")


def check_item_groups(db: Session, company_id: int, items: List[InvoiceItemCreate]) -> None:
    group_ids = {item.group_id for item in items if item.group_id is not None}
    if not group_ids:
        return
    found = db.query(Group.id).filter(Group.id.in_(group_ids), Group.company_id == company_id).count()
    if found != len(group_ids):
        raise ValidationError("Invoice items reference an unknown group")


def resolve_client(db: Session, company_id: int, client_id: int) -> User:
    client = db.query(User).filter(User.id == client_id, User.company_id == company_id).first()
    if not client or client.role != Role.CLIENT:
        raise ValidationError("Client not found in this company")
    return client


def resolve_employee(db: Session, company_id: int, employee_id: int) -> User:
    employee = db.query(User).filter(User.id == employee_id, User.company_id == company_id).first()
    if not employee or employee.role == Role.CLIENT:
        raise ValidationError("Employee not found in this company")
    return employee


def build_items(items: List[InvoiceItemCreate]) -> List[InvoiceItem]:
    return [InvoiceItem(**item.model_dump()) for item in items]


def apply_items(invoice: Invoice, items: List[InvoiceItem]) -> None:
    # delete-orphan cascade drops the replaced lines on flush
    invoice.items = items
    invoice.total_ht, invoice.total = calculate_invoice_totals(items)


def create_invoice(db: Session, *, payload: InvoiceCreate, company_id: int, issued_by: User) -> Invoice:
    """Validate and persist an invoice with its items in a single transaction."""
    resolve_client(db, company_id, payload.client_id)
    employee_id = payload.employee_id if payload.employee_id is not None else issued_by.id
    resolve_employee(db, company_id, employee_id)
    check_item_taxes(db, payload.items)
    check_item_groups(db, company_id, payload.items)

    if payload.ref:
        if _ref_taken(db, company_id, payload.ref):
            raise ValidationError("Invoice reference already exists")
        ref = payload.ref
    else:
        ref = next_invoice_ref(db, company_id, payload.type)

    data = payload.model_dump(exclude={"items", "ref", "employee_id"})
    invoice = Invoice(**data, ref=ref, employee_id=employee_id, company_id=company_id)
    apply_items(invoice, build_items(payload.items))

    with transaction(db):
        db.add(invoice)
    db.refresh(invoice)
    logger.info(f"Invoice {invoice.ref} ({invoice.type}) created for company {company_id}")
    return invoice


def update_invoice(db: Session, *, invoice: Invoice, payload: InvoiceUpdate) -> Invoice:
    """Partial update; replacing items recomputes totals in the same transaction."""
    update_data = payload.model_dump(exclude_unset=True, exclude={"items"})
    company_id = invoice.company_id

    if update_data.get("client_id") is not None:
        resolve_client(db, company_id, update_data["client_id"])
    else:
        update_data.pop("client_id", None)
    if update_data.get("employee_id") is not None:
        resolve_employee(db, company_id, update_data["employee_id"])
    if update_data.get("ref") is not None and _ref_taken(db, company_id, update_data["ref"], exclude_id=invoice.id):
        raise ValidationError("Invoice reference already exists")
    for field in ("ref", "type", "subscription", "paid", "archived"):
        # Non-nullable columns: an explicit null means "leave unchanged"
        if field in update_data and update_data[field] is None:
            update_data.pop(field)

    items = payload.items if "items" in payload.model_fields_set else None
    if items is not None:
        check_item_taxes(db, items)
        check_item_groups(db, company_id, items)

    with transaction(db):
        for field, value in update_data.items():
            setattr(invoice, field, value)
        if items is not None:
            apply_items(invoice, build_items(items))
    db.refresh(invoice)
    return invoice


def delete_invoice(db: Session, *, invoice: Invoice) -> None:
    if invoice.transfers:
        raise ValidationError("Invoice is linked to a transfer; detach it before deleting")
    with transaction(db):
        db.delete(invoice)
    logger.info(f"Invoice {invoice.ref} deleted from company {invoice.company_id}")
