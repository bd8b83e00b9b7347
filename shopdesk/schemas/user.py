from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator

from shopdesk.models.user import UserRole
from shopdesk.schemas.common import ApiModel, PageOut


class LoginRequest(ApiModel):
    identity: str = Field(
        min_length=1,
        max_length=320,
        validation_alias=AliasChoices("identity", "phone", "email"),
    )
    password: str = Field(min_length=1, max_length=128)


class UserOut(ApiModel):
    id: int
    phone: str | None
    email: str | None
    name: str
    role: UserRole
    avatar_url: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TokenOut(ApiModel):
    token: str
    token_type: str = "bearer"
    user: UserOut


class OAuthTokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ProfileUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    password: str | None = Field(default=None, min_length=6, max_length=128)
    avatar_url: str | None = Field(default=None, max_length=500)


def _normalize_email(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().lower()
    if not value:
        return None
    if "@" not in value or value.startswith("@") or value.endswith("@"):
        raise ValueError("Invalid email address")
    return value


def _normalize_phone(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().replace(" ", "")
    return value or None


class AdminCreate(ApiModel):
    phone: str | None = Field(default=None, max_length=20)
    email: str | None = Field(default=None, max_length=320)
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    role: UserRole = UserRole.ADMIN
    avatar_url: str | None = Field(default=None, max_length=500)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return _normalize_email(value)

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: str | None) -> str | None:
        return _normalize_phone(value)


class AdminUpdate(ApiModel):
    phone: str | None = Field(default=None, max_length=20)
    email: str | None = Field(default=None, max_length=320)
    password: str | None = Field(default=None, min_length=6, max_length=128)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    role: UserRole | None = None
    avatar_url: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return _normalize_email(value)

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: str | None) -> str | None:
        return _normalize_phone(value)


class UserListOut(PageOut):
    users: list[UserOut]
