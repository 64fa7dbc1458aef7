"""CRUD operations for tax rates."""

from typing import List, Optional

from sqlalchemy.orm import Session

from facturo.app.models.tax import Tax
from facturo.app.schemas.tax import TaxCreate, TaxUpdate


class CRUDTax:
    def create(self, db: Session, *, obj_in: TaxCreate) -> Tax:
        obj = Tax(**obj_in.model_dump())
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def get(self, db: Session, *, tax_id: int) -> Optional[Tax]:
        return db.query(Tax).filter(Tax.id == tax_id).first()

    def get_multi(self, db: Session) -> List[Tax]:
        return db.query(Tax).order_by(Tax.percent.asc(), Tax.id.asc()).all()

    def update(self, db: Session, *, db_obj: Tax, obj_in: TaxUpdate) -> Tax:
        update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: Tax) -> Tax:
        db.delete(db_obj)
        db.commit()
        return db_obj


tax_crud = CRUDTax()
