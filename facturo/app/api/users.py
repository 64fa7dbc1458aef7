"""User management within a tenant: clients, employees, managers, admins."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from facturo.app.core.errors import Forbidden, NotFound, ValidationError
from facturo.app.core.logger import logger
from facturo.app.core.permissions import READ, WRITE, Policy, ensure_same_tenant, is_super_admin, scope_company_id
from facturo.app.core.security import get_password_hash
from facturo.app.db.session import get_db
from facturo.app.dependencies.auth import get_current_user, require
from facturo.app.models.company import Company
from facturo.app.models.invoice import Invoice
from facturo.app.models.user import Role, User
from facturo.app.schemas.auth import MessageResponse
from facturo.app.schemas.user import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/api/users", tags=["users"])


def _get_user(db: Session, user_id: int, current_user: User, policy: Policy) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    ensure_same_tenant(current_user, user.company_id, policy)
    return user


def _check_code_available(db: Session, code: str | None, company_id: int | None, exclude_id: int | None = None) -> None:
    if not code or not code.strip():
        return
    query = db.query(User.id).filter(User.code == code, User.company_id == company_id)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise ValidationError("Client code already exists")


def _check_email_available(db: Session, email: str, exclude_id: int | None = None) -> None:
    query = db.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise ValidationError("Email already exists")


def _check_role_assignment(current_user: User, role: Role) -> None:
    if role == Role.SUPER_ADMIN and not is_super_admin(current_user):
        raise Forbidden("Only a super admin can grant the SUPER_ADMIN role")


def _has_invoices(db: Session, user_id: int) -> bool:
    query = db.query(Invoice.id).filter(or_(Invoice.client_id == user_id, Invoice.employee_id == user_id))
    return query.first() is not None


def _resolve_target_company(db: Session, current_user: User, user: User, update_data: dict) -> int | None:
    """Company the user belongs to once the update applies; only a super admin can move users."""
    requested = update_data.pop("company_id", None)
    role = update_data.get("role") or user.role

    if role == Role.SUPER_ADMIN:
        company_id = None
    elif requested is not None and is_super_admin(current_user):
        if not db.query(Company.id).filter(Company.id == requested).first():
            raise ValidationError("Company not found")
        company_id = requested
    else:
        company_id = user.company_id

    if company_id is None and role != Role.SUPER_ADMIN:
        raise ValidationError("company_id is required for this role")
    if user.company_id is not None and company_id != user.company_id and _has_invoices(db, user.id):
        raise ValidationError("User is referenced by invoices and cannot leave their company")
    return company_id


@router.get("/", response_model=list[UserRead])
def list_users(
    role: Role | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("users", READ)),
):
    query = db.query(User)
    company_id = scope_company_id(current_user, policy)
    if company_id is not None:
        query = query.filter(User.company_id == company_id)
    if role is not None:
        query = query.filter(User.role == role)
    return query.order_by(User.created_at.desc(), User.id.desc()).all()


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("users", WRITE)),
):
    _check_role_assignment(current_user, user_in.role)

    # Tenant comes from the principal; only a super admin may pick one
    company_id = user_in.company_id if is_super_admin(current_user) else current_user.company_id
    if user_in.role != Role.SUPER_ADMIN:
        if company_id is None:
            raise ValidationError("company_id is required")
        if not db.query(Company.id).filter(Company.id == company_id).first():
            raise ValidationError("Company not found")
    else:
        company_id = None

    _check_email_available(db, user_in.email)
    _check_code_available(db, user_in.code, company_id)

    data = user_in.model_dump(exclude={"password", "company_id", "is_active"}, exclude_none=True)
    user = User(
        **data,
        hashed_password=get_password_hash(user_in.password),
        is_active=True if user_in.is_active is None else user_in.is_active,
        company_id=company_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} ({user.role.value}) created in company {company_id} by {current_user.id}")
    return user


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("users", READ)),
):
    return _get_user(db, user_id, current_user, policy)


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("users", WRITE)),
):
    user = _get_user(db, user_id, current_user, policy)
    update_data = user_in.model_dump(exclude_unset=True)
    password = update_data.pop("password", None)

    if update_data.get("role") is not None:
        _check_role_assignment(current_user, update_data["role"])
    if user.role == Role.SUPER_ADMIN and not is_super_admin(current_user):
        raise Forbidden("Only a super admin can modify a super admin")
    company_id = _resolve_target_company(db, current_user, user, update_data)
    if update_data.get("email") is not None:
        _check_email_available(db, update_data["email"], exclude_id=user.id)
    if "code" in update_data or company_id != user.company_id:
        code = update_data["code"] if "code" in update_data else user.code
        _check_code_available(db, code, company_id, exclude_id=user.id)

    for field in ("name", "email", "role", "is_active", "discount"):
        # Non-nullable columns: an explicit null means "leave unchanged"
        if field in update_data and update_data[field] is None:
            update_data.pop(field)
    for field, value in update_data.items():
        setattr(user, field, value)
    user.company_id = company_id
    if password:
        user.hashed_password = get_password_hash(password)
    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("users", WRITE)),
):
    user = _get_user(db, user_id, current_user, policy)
    if user.id == current_user.id:
        raise ValidationError("Cannot delete your own account")
    if user.role == Role.SUPER_ADMIN and not is_super_admin(current_user):
        raise Forbidden("Only a super admin can delete a super admin")
    if _has_invoices(db, user.id):
        raise ValidationError("User is referenced by invoices; deactivate the account instead")
    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} deleted by {current_user.id}")
    return {"message": "User deleted successfully"}
