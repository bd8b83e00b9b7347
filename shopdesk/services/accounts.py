import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopdesk.core.config import settings
from shopdesk.core.errors import BadRequestError, ConflictError, TooManyRequestsError, UnauthenticatedError
from shopdesk.core.security import hash_password, verify_password
from shopdesk.models.user import User

logger = logging.getLogger(__name__)


class SlidingWindowLimiter:
    def __init__(self) -> None:
        self._attempts: dict[str, list[datetime]] = defaultdict(list)

    def check(self, key: str) -> bool:
        now = datetime.now(timezone.utc)
        window_start = now - timedelta(seconds=settings.login_rate_limit_window_seconds)
        self._attempts[key] = [dt for dt in self._attempts[key] if dt >= window_start]
        return len(self._attempts[key]) >= settings.login_rate_limit_max_attempts

    def hit(self, key: str) -> None:
        self._attempts[key].append(datetime.now(timezone.utc))

    def clear(self, key: str) -> None:
        self._attempts.pop(key, None)

    def reset(self) -> None:
        self._attempts.clear()


login_rate_limiter = SlidingWindowLimiter()


def normalize_identity(value: str) -> str:
    value = value.strip()
    if settings.identity_field == "email":
        return value.lower()
    return value.replace(" ", "")


def identity_column():
    return func.lower(User.email) if settings.identity_field == "email" else User.phone


def find_user_by_identity(db: Session, identity: str) -> User | None:
    return db.scalar(select(User).where(identity_column() == normalize_identity(identity)))


def authenticate_user(db: Session, identity: str, password: str, client_ip: str | None = None) -> User:
    rate_key = f"{client_ip or 'unknown'}:{normalize_identity(identity)}"
    if login_rate_limiter.check(rate_key):
        raise TooManyRequestsError("Too many login attempts, try again later")

    user = find_user_by_identity(db, identity)
    if not user or not verify_password(password, user.password_hash):
        login_rate_limiter.hit(rate_key)
        logger.info("login failed identity=%s", normalize_identity(identity))
        raise UnauthenticatedError("Invalid credentials")
    if not user.is_active:
        raise UnauthenticatedError("Account is deactivated")

    login_rate_limiter.clear(rate_key)
    logger.info("login ok user=%s", user.id)
    return user


def ensure_identity_available(
    db: Session,
    *,
    phone: str | None,
    email: str | None,
    exclude_id: int | None = None,
) -> None:
    if phone:
        query = select(User.id).where(User.phone == phone)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if db.scalar(query) is not None:
            raise ConflictError("A user with this phone already exists")
    if email:
        query = select(User.id).where(func.lower(User.email) == email.lower())
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if db.scalar(query) is not None:
            raise ConflictError("A user with this email already exists")


def create_user(
    db: Session,
    *,
    name: str,
    password: str,
    role,
    phone: str | None = None,
    email: str | None = None,
    avatar_url: str | None = None,
) -> User:
    if settings.identity_field == "email" and not email:
        raise BadRequestError("Email is required")
    if settings.identity_field == "phone" and not phone:
        raise BadRequestError("Phone is required")
    ensure_identity_available(db, phone=phone, email=email)

    user = User(
        name=name.strip(),
        phone=phone,
        email=email,
        password_hash=hash_password(password),
        role=role,
        avatar_url=avatar_url,
        is_active=True,
    )
    db.add(user)
    db.flush()
    return user
