from pydantic import EmailStr, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from contest_portal.core.config import settings
from contest_portal.models.user import UserRole, UserStatus
from contest_portal.schemas.common import CamelModel


def check_password_length(value: str) -> str:
    if len(value) < settings.PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")
    return value


def normalize_student_id(value: Optional[str]) -> Optional[str]:
    """Trim a student ID; blank or overlong values are rejected"""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Student ID cannot be blank")
    if len(value) > settings.STUDENT_ID_MAX_LENGTH:
        raise ValueError(f"Student ID cannot exceed {settings.STUDENT_ID_MAX_LENGTH} characters")
    return value


class UserRegister(CamelModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str
    phone: Optional[str] = Field(None, max_length=20)
    real_name: Optional[str] = Field(None, max_length=100)
    student_id: Optional[str] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return check_password_length(v)

    @field_validator("student_id")
    @classmethod
    def check_student_id(cls, v: Optional[str]) -> Optional[str]:
        return normalize_student_id(v)


class UserLogin(CamelModel):
    """Login by student ID, phone or email; `studentId` is accepted as a legacy field name"""
    login: Optional[str] = None
    student_id: Optional[str] = None
    password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def require_identifier(self):
        if not (self.login or "").strip() and not (self.student_id or "").strip():
            raise ValueError("Account and password are required")
        return self

    @property
    def identifier(self) -> str:
        return (self.login or self.student_id or "").strip()


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    student_id: Optional[str] = None
    phone: Optional[str] = None
    real_name: Optional[str] = None
    avatar: Optional[str] = None
    role: UserRole
    status: UserStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class AuthData(CamelModel):
    user: UserResponse
    token: str
