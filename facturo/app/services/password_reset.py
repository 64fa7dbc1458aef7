"""Password reset flow: issue a one-time token, then consume it."""

from datetime import timedelta

from sqlalchemy.orm import Session

from facturo.app.core.errors import NotFound, ValidationError
from facturo.app.core.logger import logger
from facturo.app.core.security import generate_reset_token, get_password_hash, hash_reset_token
from facturo.app.core.settings import get_settings
from facturo.app.core.time import ensure_aware, utc_now
from facturo.app.models.user import User


def request_password_reset(db: Session, email: str) -> tuple[User, str]:
    """Store the hash of a fresh token on the user and return the raw token.

    Unknown addresses raise NotFound.
    """
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        raise NotFound("User not found")

    token = generate_reset_token()
    user.reset_token_hash = hash_reset_token(token)
    user.reset_token_expires_at = utc_now() + timedelta(seconds=get_settings().PASSWORD_RESET_EXPIRE_SECONDS)
    db.commit()
    logger.info(f"Password reset issued for user {user.id}")
    return user, token


def build_reset_url(token: str) -> str:
    return f"{get_settings().APP_BASE_URL.rstrip('/')}/reset-password?token={token}"


def reset_password(db: Session, token: str, new_password: str) -> User:
    """Re-hash the presented token, check expiry, set the password and burn the token."""
    token_hash = hash_reset_token(token)
    user = db.query(User).filter(User.reset_token_hash == token_hash).first()
    if not user:
        raise ValidationError("Invalid or expired reset token")

    expires_at = ensure_aware(user.reset_token_expires_at)
    if expires_at is None or expires_at <= utc_now():
        user.reset_token_hash = None
        user.reset_token_expires_at = None
        db.commit()
        raise ValidationError("Invalid or expired reset token")

    user.hashed_password = get_password_hash(new_password)
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    db.commit()
    logger.info(f"Password reset completed for user {user.id}")
    return user
