"""Login, current-user and password reset endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from facturo.app.core.errors import ValidationError
from facturo.app.core.logger import logger
from facturo.app.core.security import create_access_token, verify_password
from facturo.app.core.settings import get_settings
from facturo.app.db.session import get_db
from facturo.app.dependencies.auth import get_current_user
from facturo.app.models.user import User
from facturo.app.schemas.auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    Token,
)
from facturo.app.schemas.user import UserRead
from facturo.app.services.password_reset import build_reset_url, request_password_reset, reset_password

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == credentials.email.lower()).first()
    if not user or not user.hashed_password:
        logger.info(f"Login failed for {credentials.email}")
        raise ValidationError("Invalid credentials")
    if not user.is_active:
        raise ValidationError("User is inactive")
    if not verify_password(credentials.password, user.hashed_password):
        logger.info(f"Login failed for {credentials.email}")
        raise ValidationError("Invalid credentials")

    token = create_access_token(user_id=user.id)
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/forgot-password", response_model=ForgotPasswordResponse, response_model_exclude_none=True)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    _, token = request_password_reset(db, payload.email)
    response = {"message": "Password reset email sent successfully"}
    # No mailer is wired yet; the link is only handed back in development
    if get_settings().is_development:
        response["reset_url"] = build_reset_url(token)
    return response


@router.post("/reset-password", response_model=MessageResponse)
def confirm_password_reset(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    reset_password(db, payload.token, payload.password)
    return {"message": "Password has been reset"}
