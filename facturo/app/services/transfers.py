"""Transfer helpers: invoice linking and advisory reconciliation."""

from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from facturo.app.core.errors import ValidationError
from facturo.app.models.invoice import Invoice
from facturo.app.models.transfer import Transfer


def resolve_invoices(db: Session, company_id: int, invoice_ids: List[int]) -> List[Invoice]:
    unique_ids = list(dict.fromkeys(invoice_ids))
    if not unique_ids:
        return []
    invoices = (
        db.query(Invoice)
        .filter(Invoice.id.in_(unique_ids), Invoice.company_id == company_id)
        .order_by(Invoice.id.asc())
        .all()
    )
    if len(invoices) != len(unique_ids):
        raise ValidationError("Some invoices do not exist in this company")
    return invoices


def summarize_transfer(transfer: Transfer) -> dict:
    """Serialize a transfer with its reconciliation figures. Mismatches are reported, not refused."""
    invoiced_total = sum((Decimal(str(inv.total or 0)) for inv in transfer.invoices), Decimal("0.00"))
    amount = Decimal(str(transfer.amount))
    difference = (amount - invoiced_total).quantize(Decimal("0.01"))
    return {
        "id": transfer.id,
        "ref": transfer.ref,
        "amount": amount,
        "payment_date": transfer.payment_date,
        "company_id": transfer.company_id,
        "invoice_ids": [inv.id for inv in transfer.invoices],
        "invoiced_total": invoiced_total.quantize(Decimal("0.01")),
        "difference": difference,
        "reconciled": bool(transfer.invoices) and difference == 0,
        "created_at": transfer.created_at,
        "updated_at": transfer.updated_at,
    }
