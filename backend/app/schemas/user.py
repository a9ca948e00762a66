"""User, auth and admin-account schemas."""
import re
import uuid
from typing import Optional
from datetime import datetime
from pydantic import Field, field_validator
from app.schemas.base import CamelModel
from app.schemas.common import PaginationInfo

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if not _EMAIL_RE.match(v):
        raise ValueError("Please include a valid email")
    return v


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: str
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _normalize_email(v)


class LoginRequest(CamelModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _normalize_email(v)


class UserResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class TokenResponse(CamelModel):
    token: str
    user: UserResponse


class AdminCreate(RegisterRequest):
    pass


class AdminProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = Field(default=None, min_length=6)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v) if v is not None else v


class UserPage(CamelModel):
    data: list[UserResponse]
    pagination: PaginationInfo
