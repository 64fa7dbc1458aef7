"""Tenant administration endpoints (SUPER_ADMIN only)."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from facturo.app.core.errors import NotFound, ValidationError
from facturo.app.core.logger import logger
from facturo.app.core.permissions import READ, WRITE
from facturo.app.db.session import get_db
from facturo.app.dependencies.auth import require
from facturo.app.models.company import Company
from facturo.app.schemas.auth import MessageResponse
from facturo.app.schemas.company import CompanyCreate, CompanyWithCountRead

router = APIRouter(prefix="/api/companies", tags=["companies"])


def _get_company(db: Session, company_id: int) -> Company:
    company = db.query(Company).filter(Company.id == company_id).first()
    if not company:
        raise NotFound("Company not found")
    return company


@router.get("/", response_model=list[CompanyWithCountRead], dependencies=[Depends(require("companies", READ))])
def list_companies(db: Session = Depends(get_db)):
    return db.query(Company).order_by(Company.created_at.desc(), Company.id.desc()).all()


@router.post(
    "/",
    response_model=CompanyWithCountRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require("companies", WRITE))],
)
def create_company(company_in: CompanyCreate, db: Session = Depends(get_db)):
    company = Company(**company_in.model_dump())
    db.add(company)
    db.commit()
    db.refresh(company)
    logger.info(f"Company {company.id} '{company.name}' created")
    return company


@router.get("/{company_id}", response_model=CompanyWithCountRead, dependencies=[Depends(require("companies", READ))])
def get_company(company_id: int, db: Session = Depends(get_db)):
    return _get_company(db, company_id)


@router.put("/{company_id}", response_model=CompanyWithCountRead, dependencies=[Depends(require("companies", WRITE))])
def update_company(company_id: int, company_in: CompanyCreate, db: Session = Depends(get_db)):
    company = _get_company(db, company_id)
    # Full replace: omitted optional fields are cleared
    for field, value in company_in.model_dump().items():
        setattr(company, field, value)
    db.commit()
    db.refresh(company)
    return company


@router.delete("/{company_id}", response_model=MessageResponse, dependencies=[Depends(require("companies", WRITE))])
def delete_company(company_id: int, db: Session = Depends(get_db)):
    company = _get_company(db, company_id)
    if company.user_count > 0:
        raise ValidationError("Cannot delete company with existing users. Please reassign or delete users first.")
    db.delete(company)
    db.commit()
    logger.info(f"Company {company_id} deleted")
    return {"message": "Company deleted successfully"}
