"""Tax rate endpoints. Rates are global and shared by every company."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from facturo.app.core.errors import NotFound
from facturo.app.core.logger import logger
from facturo.app.core.permissions import READ, WRITE
from facturo.app.crud.crud_tax import tax_crud
from facturo.app.db.session import get_db
from facturo.app.dependencies.auth import require
from facturo.app.schemas.tax import TaxCreate, TaxRead, TaxUpdate

router = APIRouter(prefix="/api/tax", tags=["taxes"])


def _get_tax(db: Session, tax_id: int):
    tax = tax_crud.get(db, tax_id=tax_id)
    if not tax:
        raise NotFound("Tax not found")
    return tax


@router.get("/", response_model=list[TaxRead], dependencies=[Depends(require("taxes", READ))])
def list_taxes(db: Session = Depends(get_db)):
    return tax_crud.get_multi(db)


@router.post("/", response_model=TaxRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require("taxes", WRITE))])
def create_tax(tax_in: TaxCreate, db: Session = Depends(get_db)):
    tax = tax_crud.create(db, obj_in=tax_in)
    logger.info(f"Tax {tax.id} '{tax.name}' ({tax.percent}%) created")
    return tax


@router.get("/{tax_id}", response_model=TaxRead, dependencies=[Depends(require("taxes", READ))])
def get_tax(tax_id: int, db: Session = Depends(get_db)):
    return _get_tax(db, tax_id)


@router.put("/{tax_id}", response_model=TaxRead, dependencies=[Depends(require("taxes", WRITE))])
def update_tax(tax_id: int, tax_in: TaxUpdate, db: Session = Depends(get_db)):
    tax = _get_tax(db, tax_id)
    return tax_crud.update(db, db_obj=tax, obj_in=tax_in)


@router.delete("/{tax_id}", dependencies=[Depends(require("taxes", WRITE))])
def delete_tax(tax_id: int, db: Session = Depends(get_db)):
    tax = _get_tax(db, tax_id)
    tax_crud.delete(db, db_obj=tax)
    # Existing invoice lines keep their own rate snapshot
    return {"success": True}
