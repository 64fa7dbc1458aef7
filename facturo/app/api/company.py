"""The caller's own company profile."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from facturo.app.core.errors import NotFound
from facturo.app.core.permissions import READ, WRITE
from facturo.app.db.session import get_db
from facturo.app.dependencies.auth import get_current_user, require
from facturo.app.models.company import Company
from facturo.app.models.user import User
from facturo.app.schemas.company import CompanyRead, CompanyUpdate

router = APIRouter(prefix="/api/company", tags=["company"])


def _own_company(db: Session, user: User) -> Company:
    company = db.query(Company).filter(Company.id == user.company_id).first()
    if not company:
        raise NotFound("Company not found")
    return company


@router.get("/", response_model=CompanyRead, dependencies=[Depends(require("company", READ))])
def read_own_company(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _own_company(db, current_user)


@router.put("/", response_model=CompanyRead, dependencies=[Depends(require("company", WRITE))])
def update_own_company(
    company_in: CompanyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    company = _own_company(db, current_user)
    update_data = company_in.model_dump(exclude_unset=True)
    if update_data.get("name", "") is None:
        update_data.pop("name")
    for field, value in update_data.items():
        setattr(company, field, value)
    db.commit()
    db.refresh(company)
    return company
