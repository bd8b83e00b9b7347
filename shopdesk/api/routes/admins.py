import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from shopdesk.api.deps import require_access
from shopdesk.api.pagination import PageParams, page_meta, page_params, paginate_scalars
from shopdesk.core.config import settings
from shopdesk.core.errors import BadRequestError, NotFoundError
from shopdesk.core.permissions import Action, Resource
from shopdesk.core.security import hash_password
from shopdesk.db.database import get_db
from shopdesk.models.user import User, UserRole
from shopdesk.schemas.common import MessageOut
from shopdesk.schemas.user import AdminCreate, AdminUpdate, UserListOut, UserOut
from shopdesk.services.accounts import create_user, ensure_identity_available

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admins", tags=["Admins"])

SUPER_ADMIN_ONLY = [UserRole.SUPER_ADMIN]


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("", response_model=UserListOut)
def list_admins(
    role: UserRole | None = None,
    include_shop_agents: bool = Query(default=False, alias="includeShopAgents"),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    params: PageParams = Depends(page_params),
    _: User = Depends(require_access(Resource.ADMINS, Action.READ, SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    query = select(User).order_by(User.created_at.desc(), User.id.desc())
    if role is not None:
        query = query.where(User.role == role)
    elif not include_shop_agents:
        query = query.where(User.role != UserRole.SHOP_AGENT)
    if not include_inactive:
        query = query.where(User.is_active.is_(True))
    users, total = paginate_scalars(db, query, params)
    return UserListOut(users=users, **page_meta(total, params))


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_admin(
    payload: AdminCreate,
    _: User = Depends(require_access(Resource.ADMINS, Action.CREATE, SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    user = create_user(
        db,
        name=payload.name,
        password=payload.password,
        role=payload.role,
        phone=payload.phone,
        email=payload.email,
        avatar_url=payload.avatar_url,
    )
    db.commit()
    db.refresh(user)
    logger.info("user created id=%s role=%s", user.id, user.role.value)
    return user


@router.get("/{user_id}", response_model=UserOut)
def get_admin(
    user_id: int,
    _: User = Depends(require_access(Resource.ADMINS, Action.READ, SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    return _get_user(db, user_id)


@router.put("/{user_id}", response_model=UserOut)
def update_admin(
    user_id: int,
    payload: AdminUpdate,
    current_user: User = Depends(require_access(Resource.ADMINS, Action.UPDATE, SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    user = _get_user(db, user_id)
    changes = payload.model_dump(exclude_unset=True)

    if user.id == current_user.id and changes.get("is_active") is False:
        raise BadRequestError("You cannot deactivate your own account")
    if user.id == current_user.id and changes.get("role") not in (None, UserRole.SUPER_ADMIN):
        raise BadRequestError("You cannot change your own role")

    ensure_identity_available(
        db,
        phone=changes.get("phone"),
        email=changes.get("email"),
        exclude_id=user.id,
    )
    if "phone" in changes and settings.identity_field == "phone" and not changes["phone"]:
        raise BadRequestError("Phone is required")
    if "email" in changes and settings.identity_field == "email" and not changes["email"]:
        raise BadRequestError("Email is required")

    password = changes.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    for field_name, value in changes.items():
        if field_name in {"name", "role", "is_active"} and value is None:
            continue
        setattr(user, field_name, value)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=MessageOut)
def delete_admin(
    user_id: int,
    current_user: User = Depends(require_access(Resource.ADMINS, Action.DELETE, SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    user = _get_user(db, user_id)
    if user.id == current_user.id:
        raise BadRequestError("You cannot delete your own account")
    user.is_active = False
    db.commit()
    logger.info("user deactivated id=%s by=%s", user.id, current_user.id)
    return MessageOut(message="User deactivated successfully")
