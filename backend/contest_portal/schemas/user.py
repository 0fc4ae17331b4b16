from pydantic import Field, field_validator
from typing import Optional

from contest_portal.schemas.common import CamelModel
from contest_portal.schemas.auth import check_password_length, normalize_student_id


class ProfileUpdate(CamelModel):
    phone: Optional[str] = Field(None, max_length=20)
    real_name: Optional[str] = Field(None, max_length=100)
    avatar: Optional[str] = None
    student_id: Optional[str] = None

    @field_validator("student_id")
    @classmethod
    def check_student_id(cls, v: Optional[str]) -> Optional[str]:
        return normalize_student_id(v)


class PasswordChange(CamelModel):
    old_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v: str) -> str:
        return check_password_length(v)


class UserSummary(CamelModel):
    """Identity fields shown next to registrations and awards"""
    id: int
    username: str
    email: str
    real_name: Optional[str] = None
    student_id: Optional[str] = None
    phone: Optional[str] = None
