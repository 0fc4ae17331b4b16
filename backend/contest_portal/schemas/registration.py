from pydantic import Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from contest_portal.models.registration import RegistrationStatus
from contest_portal.schemas.common import CamelModel, Pagination
from contest_portal.schemas.competition import CompetitionBrief
from contest_portal.schemas.user import UserSummary


class Attachment(CamelModel):
    url: str
    original_name: Optional[str] = None
    filename: Optional[str] = None
    mime: Optional[str] = None
    size: Optional[int] = None
    uploaded_at: Optional[str] = None


class RegistrationCreate(CamelModel):
    competition_id: int
    registration_data: Optional[Dict[str, Any]] = None
    attachments: Optional[List[Attachment]] = None


class RegistrationResponse(CamelModel):
    id: int
    user_id: int
    competition_id: int
    status: RegistrationStatus
    registration_data: Optional[Dict[str, Any]] = None
    attachments: List[Attachment] = Field(default_factory=list)
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    competition: Optional[CompetitionBrief] = None
    user: Optional[UserSummary] = None

    @field_validator("attachments", mode="before")
    @classmethod
    def default_attachments(cls, v):
        return v or []


class RegistrationListData(CamelModel):
    registrations: List[RegistrationResponse]
    pagination: Pagination
