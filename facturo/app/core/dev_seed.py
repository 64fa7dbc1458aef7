import os

from sqlalchemy.orm import Session

from facturo.app.core.logger import logger
from facturo.app.core.security import get_password_hash
from facturo.app.core.settings import get_settings
from facturo.app.models.tax import Tax
from facturo.app.models.user import Role, User

DEFAULT_TAXES = [
    ("TGC 0%", 0.0),
    ("TGC 3%", 3.0),
    ("TGC 6%", 6.0),
    ("TGC 11%", 11.0),
    ("TGC 22%", 22.0),
]


def ensure_default_data(db: Session) -> None:
    """
    Create the platform super admin and the default tax rates if they do not exist.
    Skips execution when running under pytest to avoid altering test expectations.
    """
    if os.getenv("PYTEST_CURRENT_TEST"):
        return

    settings = get_settings()
    created = False

    email = settings.SUPER_ADMIN_EMAIL.lower()
    if not db.query(User).filter(User.email == email).first():
        db.add(
            User(
                email=email,
                name="Super Admin",
                hashed_password=get_password_hash(settings.SUPER_ADMIN_PASSWORD),
                role=Role.SUPER_ADMIN,
                is_active=True,
            )
        )
        created = True

    if db.query(Tax).count() == 0:
        for name, percent in DEFAULT_TAXES:
            db.add(Tax(name=name, percent=percent))
        created = True

    if created:
        db.commit()
        logger.info("Default super admin and tax rates seeded")
