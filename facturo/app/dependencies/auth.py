"""Authentication dependencies: resolve the principal and run the access gate."""

from typing import Callable

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from facturo.app.core.errors import Unauthenticated
from facturo.app.core.permissions import Policy, authorize
from facturo.app.core.security import decode_access_token
from facturo.app.db.session import get_db
from facturo.app.models.user import User


def get_current_user(db: Session = Depends(get_db), authorization: str | None = Header(default=None)) -> User:
    # Expect Authorization: Bearer <token>
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthenticated()
    token = authorization.split(" ", 1)[1]
    try:
        # Decode and validate JWT to retrieve subject
        payload = decode_access_token(token)
    except ValueError:
        raise Unauthenticated()

    user_id = payload.get("sub")
    try:
        user_id_int = int(user_id)
    except (TypeError, ValueError):
        raise Unauthenticated()

    user = db.query(User).filter(User.id == user_id_int).first()
    if not user or not user.is_active:
        raise Unauthenticated()
    return user


def require(resource: str, action: str) -> Callable[..., Policy]:
    """Dependency factory: authenticate, then evaluate the policy for (resource, action)."""

    def _gate(current_user: User = Depends(get_current_user)) -> Policy:
        return authorize(current_user, resource, action)

    return _gate
