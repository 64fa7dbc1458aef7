"""Accounting batch export (ebatch CSV) for issued invoices."""

import csv
import io
import re
from datetime import date, datetime, time, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from facturo.app.models.invoice import Invoice

EBATCH_HEADER = [
    "DATE", "COMPTE", "TIERS", "JOURNAL", "PIECE", "MONTANT", "DC", "LIBELLE", "CONTREPTIE",
    "SCCONTR", "SECTEUR", "NATURE", "DATREGLE", "NUMLET", "NOM", "AD1", "AD2", "AD3", "AD4",
    "AD5", "TEL", "FAX", "GROUPE", "ADMAIL", "NOMBQ", "NUMBQE", "TITULAIRE", "REPRES", "TEST",
]

CUSTOMER_ACCOUNT = "411000"
SALES_JOURNAL = "FAC"
NULL = "NULL"
LABEL_MAX_LENGTH = 30

_NUMERIC_CODE = re.compile(r"^\d+$")


def _value(value) -> str:
    if value is None or value == "":
        return NULL
    return str(value)


def list_exportable_invoices(
    db: Session, company_id: int, start: Optional[date] = None, end: Optional[date] = None
) -> List[Invoice]:
    query = (
        db.query(Invoice)
        .options(joinedload(Invoice.client))
        .filter(Invoice.company_id == company_id, Invoice.type == "invoice")
    )
    if start is not None:
        query = query.filter(Invoice.created_at >= datetime.combine(start, time.min, tzinfo=timezone.utc))
    if end is not None:
        query = query.filter(Invoice.created_at <= datetime.combine(end, time.max, tzinfo=timezone.utc))
    return query.order_by(Invoice.created_at.asc(), Invoice.id.asc()).all()


def build_ebatch_row(invoice: Invoice) -> List[str]:
    client = invoice.client
    code = (client.code or "").strip() if client else ""
    tiers = code if _NUMERIC_CODE.match(code) else NULL
    client_name = client.name if client else None
    label = (invoice.wording or f"FACT {client_name or ''}")[:LABEL_MAX_LENGTH]
    locality = " ".join(part for part in (client.zip_code, client.city) if part) if client else ""

    row = [
        invoice.created_at.strftime("%d/%m/%Y"),
        CUSTOMER_ACCOUNT,
        tiers,
        SALES_JOURNAL,
        invoice.ref,
        invoice.total if invoice.total is not None else 0,
        "D",
        label,
        NULL, NULL, NULL, NULL, NULL, NULL,
        client_name,
        client.address if client else None,
        locality,
        NULL, NULL, NULL,
        client.phone if client else None,
        NULL, NULL,
        client.email if client else None,
        NULL, NULL, NULL,
        "1",
        NULL,
    ]
    return [_value(v) for v in row]


def build_ebatch_csv(invoices: List[Invoice]) -> str:
    buffer = io.StringIO()
    buffer.write(",".join(EBATCH_HEADER) + "\n")
    # Every data cell is quoted, the header is not
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for invoice in invoices:
        writer.writerow(build_ebatch_row(invoice))
    return buffer.getvalue().rstrip("\n")
