"""Accounting exports."""

from datetime import date

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from facturo.app.core.errors import ValidationError
from facturo.app.core.permissions import READ
from facturo.app.db.session import get_db
from facturo.app.dependencies.auth import get_current_user, require
from facturo.app.models.user import User
from facturo.app.services.exports import build_ebatch_csv, list_exportable_invoices

router = APIRouter(prefix="/api/exports", tags=["exports"])


@router.get("/ebatch-csv", response_class=Response, dependencies=[Depends(require("exports", READ))])
def export_ebatch_csv(
    start: date | None = None,
    end: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if start and end and start > end:
        raise ValidationError("start must be on or before end")
    invoices = list_exportable_invoices(db, current_user.company_id, start=start, end=end)
    headers = {
        "Content-Disposition": 'attachment; filename="ebatch.csv"',
        "Cache-Control": "no-store",
    }
    return Response(content=build_ebatch_csv(invoices), media_type="text/csv; charset=utf-8", headers=headers)
