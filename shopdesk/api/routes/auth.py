from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from shopdesk.api.deps import get_current_user
from shopdesk.core.config import settings
from shopdesk.core.security import create_access_token, hash_password
from shopdesk.db.database import get_db
from shopdesk.models.user import User
from shopdesk.schemas.common import MessageOut
from shopdesk.schemas.user import LoginRequest, OAuthTokenOut, ProfileUpdate, TokenOut, UserOut
from shopdesk.services.accounts import authenticate_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def get_client_ip(request: Request) -> str | None:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
        path="/",
    )


@router.post("/login", response_model=TokenOut)
def login(payload: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    user = authenticate_user(db, payload.identity, payload.password, client_ip=get_client_ip(request))
    token = create_access_token(subject=str(user.id), role=user.role.value)
    _set_auth_cookie(response, token)
    return TokenOut(token=token, user=UserOut.model_validate(user))


@router.post("/token", response_model=OAuthTokenOut)
def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = authenticate_user(db, form_data.username, form_data.password, client_ip=get_client_ip(request))
    return OAuthTokenOut(access_token=create_access_token(subject=str(user.id), role=user.role.value))


@router.post("/logout", response_model=MessageOut)
def logout(response: Response):
    response.delete_cookie(settings.auth_cookie_name, path="/")
    return MessageOut(message="Logged out successfully")


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if payload.name is not None:
        current_user.name = payload.name.strip()
    if payload.password is not None:
        current_user.password_hash = hash_password(payload.password)
    if "avatar_url" in payload.model_fields_set:
        current_user.avatar_url = payload.avatar_url or None
    db.commit()
    db.refresh(current_user)
    return current_user
