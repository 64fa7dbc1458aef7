"""Invoice routes: invoices, credit notes (avoir) and quotes (devis)."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, selectinload

from facturo.app.core.errors import Forbidden, NotFound
from facturo.app.core.permissions import READ, WRITE, Policy, ensure_same_tenant
from facturo.app.db.session import get_db
from facturo.app.dependencies.auth import get_current_user, require
from facturo.app.models.invoice import Invoice
from facturo.app.models.user import Role, User
from facturo.app.schemas.auth import MessageResponse
from facturo.app.schemas.invoice import InvoiceCreate, InvoiceRead, InvoiceType, InvoiceUpdate
from facturo.app.services.billing import create_invoice, delete_invoice, update_invoice

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _get_invoice(db: Session, invoice_id: int, current_user: User, policy: Policy) -> Invoice:
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise NotFound("Invoice not found")
    ensure_same_tenant(current_user, invoice.company_id, policy)
    if current_user.role == Role.CLIENT and invoice.client_id != current_user.id:
        raise Forbidden("You can only view your own invoices")
    return invoice


@router.get("/", response_model=List[InvoiceRead])
def list_invoices(
    type: InvoiceType | None = None,
    archived: bool | None = None,
    paid: bool | None = None,
    client_id: int | None = None,
    employee_id: int | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("invoices", READ)),
):
    query = (
        db.query(Invoice)
        .options(selectinload(Invoice.items), selectinload(Invoice.client), selectinload(Invoice.employee))
        .filter(Invoice.company_id == current_user.company_id)
    )
    # Clients only ever see their own documents
    if current_user.role == Role.CLIENT:
        query = query.filter(Invoice.client_id == current_user.id)
    elif client_id is not None:
        query = query.filter(Invoice.client_id == client_id)
    if type is not None:
        query = query.filter(Invoice.type == type)
    if archived is not None:
        query = query.filter(Invoice.archived.is_(archived))
    if paid is not None:
        query = query.filter(Invoice.paid.is_(paid))
    if employee_id is not None:
        query = query.filter(Invoice.employee_id == employee_id)
    return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()


@router.post("/", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice_route(
    invoice_in: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("invoices", WRITE)),
):
    return create_invoice(db, payload=invoice_in, company_id=current_user.company_id, issued_by=current_user)


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("invoices", READ)),
):
    return _get_invoice(db, invoice_id, current_user, policy)


@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_invoice_route(
    invoice_id: int,
    invoice_in: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("invoices", WRITE)),
):
    invoice = _get_invoice(db, invoice_id, current_user, policy)
    return update_invoice(db, invoice=invoice, payload=invoice_in)


@router.delete("/{invoice_id}", response_model=MessageResponse)
def delete_invoice_route(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("invoices", WRITE)),
):
    invoice = _get_invoice(db, invoice_id, current_user, policy)
    delete_invoice(db, invoice=invoice)
    return {"message": "Invoice deleted successfully"}
