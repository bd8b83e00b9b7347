from typing import Iterable

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.orm import Session

from shopdesk.core.config import settings
from shopdesk.core.errors import ForbiddenError, UnauthenticatedError
from shopdesk.core.permissions import AccessPolicy, Action, Resource, can_access_route, default_policy
from shopdesk.core.security import decode_token
from shopdesk.db.database import get_db
from shopdesk.models.user import User, UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def _clean_candidate(value: str | None) -> str | None:
    if not value:
        return None
    cleaned = value.strip().strip("\"'").strip()
    # Normalize accidental duplicated prefixes like: "Bearer Bearer <jwt>"
    while cleaned.lower().startswith("bearer "):
        cleaned = cleaned[7:].strip().strip("\"'").strip()
    return cleaned or None


def get_access_policy() -> AccessPolicy:
    return default_policy


def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    raw_token = _clean_candidate(token) or _clean_candidate(request.cookies.get(settings.auth_cookie_name))
    if not raw_token:
        raise UnauthenticatedError("Authentication required")

    try:
        payload = decode_token(raw_token)
    except JWTError:
        raise UnauthenticatedError("Invalid or expired token")

    subject = payload.get("sub")
    if subject is None or payload.get("type") != "access":
        raise UnauthenticatedError("Invalid or expired token")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise UnauthenticatedError("Invalid or expired token")

    user = db.scalar(select(User).where(User.id == user_id))
    if not user or not user.is_active:
        raise UnauthenticatedError("Invalid or expired token")
    return user


def require_access(
    resource: Resource,
    action: Action,
    roles: Iterable[UserRole] | None = None,
):
    """Build a dependency enforcing a route allow-list, then the resource policy.

    ``roles`` is the allow-list the route declares for itself; ``None`` means
    the route defers entirely to the resource policy.
    """
    route_roles = frozenset(roles) if roles is not None else None

    def checker(
        current_user: User = Depends(get_current_user),
        policy: AccessPolicy = Depends(get_access_policy),
    ) -> User:
        if not can_access_route(current_user.role, route_roles):
            raise ForbiddenError("You do not have permission to access this resource")
        if not policy.can_perform_action(current_user.role, resource, action):
            raise ForbiddenError(f"You do not have permission to {action.value} {resource.value}")
        return current_user

    return checker
