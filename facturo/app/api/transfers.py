"""Bank transfer endpoints with advisory reconciliation against linked invoices."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, selectinload

from facturo.app.core.errors import NotFound
from facturo.app.core.logger import logger
from facturo.app.core.permissions import READ, WRITE, Policy, ensure_same_tenant
from facturo.app.db.session import get_db, transaction
from facturo.app.dependencies.auth import get_current_user, require
from facturo.app.models.transfer import Transfer
from facturo.app.models.user import User
from facturo.app.schemas.auth import MessageResponse
from facturo.app.schemas.transfer import TransferCreate, TransferRead, TransferUpdate
from facturo.app.services.billing import generate_ref
from facturo.app.services.transfers import resolve_invoices, summarize_transfer

router = APIRouter(prefix="/api/transfers", tags=["transfers"])


def _get_transfer(db: Session, transfer_id: int, current_user: User, policy: Policy) -> Transfer:
    transfer = db.query(Transfer).filter(Transfer.id == transfer_id).first()
    if not transfer:
        raise NotFound("Transfer not found")
    ensure_same_tenant(current_user, transfer.company_id, policy)
    return transfer


@router.get("/", response_model=list[TransferRead])
def list_transfers(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("transfers", READ)),
):
    transfers = (
        db.query(Transfer)
        .options(selectinload(Transfer.invoices))
        .filter(Transfer.company_id == current_user.company_id)
        .order_by(Transfer.created_at.desc(), Transfer.id.desc())
        .all()
    )
    return [summarize_transfer(t) for t in transfers]


@router.post("/", response_model=TransferRead, status_code=status.HTTP_201_CREATED)
def create_transfer(
    transfer_in: TransferCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("transfers", WRITE)),
):
    company_id = current_user.company_id
    invoices = resolve_invoices(db, company_id, transfer_in.invoice_ids)
    transfer = Transfer(
        ref=transfer_in.ref or generate_ref("VIR"),
        amount=transfer_in.amount,
        payment_date=transfer_in.payment_date,
        company_id=company_id,
        invoices=invoices,
    )
    with transaction(db):
        db.add(transfer)
    db.refresh(transfer)
    summary = summarize_transfer(transfer)
    if not summary["reconciled"]:
        logger.info(f"Transfer {transfer.ref} does not match its invoices (difference {summary['difference']})")
    return summary


@router.get("/{transfer_id}", response_model=TransferRead)
def get_transfer(
    transfer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("transfers", READ)),
):
    return summarize_transfer(_get_transfer(db, transfer_id, current_user, policy))


@router.put("/{transfer_id}", response_model=TransferRead)
def update_transfer(
    transfer_id: int,
    transfer_in: TransferUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("transfers", WRITE)),
):
    transfer = _get_transfer(db, transfer_id, current_user, policy)
    update_data = transfer_in.model_dump(exclude_unset=True)
    invoice_ids = update_data.pop("invoice_ids", None)
    invoices = resolve_invoices(db, transfer.company_id, invoice_ids) if invoice_ids is not None else None
    for field in ("ref", "amount"):
        if field in update_data and update_data[field] is None:
            update_data.pop(field)

    with transaction(db):
        for field, value in update_data.items():
            setattr(transfer, field, value)
        if invoices is not None:
            transfer.invoices = invoices
    db.refresh(transfer)
    return summarize_transfer(transfer)


@router.delete("/{transfer_id}", response_model=MessageResponse)
def delete_transfer(
    transfer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("transfers", WRITE)),
):
    transfer = _get_transfer(db, transfer_id, current_user, policy)
    # Links are removed, the invoices themselves stay
    with transaction(db):
        transfer.invoices = []
        db.delete(transfer)
    return {"message": "Transfer deleted successfully"}
