"""Bulk imports into the caller's company."""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from facturo.app.core.permissions import WRITE
from facturo.app.db.session import get_db
from facturo.app.dependencies.auth import get_current_user, require
from facturo.app.models.user import User
from facturo.app.schemas.imports import ImportSummary
from facturo.app.services.imports import import_ebatch_invoices

router = APIRouter(prefix="/api/imports", tags=["imports"])


@router.post("/invoices", response_model=ImportSummary, dependencies=[Depends(require("imports", WRITE))])
def import_invoices(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # Same layout as /api/exports/ebatch-csv
    content = file.file.read()
    return import_ebatch_invoices(db, content, company_id=current_user.company_id, issued_by=current_user)
