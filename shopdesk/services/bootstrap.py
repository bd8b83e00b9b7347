import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopdesk.core.config import settings
from shopdesk.core.security import hash_password
from shopdesk.models.user import User, UserRole

logger = logging.getLogger(__name__)


def ensure_super_admin(db: Session) -> User | None:
    """Create the first SUPER_ADMIN from settings when none exists yet."""
    if not settings.bootstrap_admin_identity or not settings.bootstrap_admin_password:
        return None

    existing = db.scalar(select(User).where(User.role == UserRole.SUPER_ADMIN).limit(1))
    if existing:
        return None

    identity = settings.bootstrap_admin_identity
    if settings.identity_field == "email":
        identity = identity.lower()
    user = User(
        name=settings.bootstrap_admin_name,
        password_hash=hash_password(settings.bootstrap_admin_password),
        role=UserRole.SUPER_ADMIN,
        is_active=True,
        **{settings.identity_field: identity},
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("bootstrap super admin created id=%s", user.id)
    return user
