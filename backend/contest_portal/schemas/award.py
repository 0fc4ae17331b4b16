from pydantic import Field, field_validator
from typing import List, Optional
from datetime import datetime

from contest_portal.models.award import AwardLevel, AwardStatus
from contest_portal.schemas.common import CamelModel, Pagination, to_naive_utc
from contest_portal.schemas.user import UserSummary


class AwardUpdate(CamelModel):
    """Fields an owner may change while the award is pending"""
    competition_id: Optional[int] = None
    award_level: Optional[AwardLevel] = None
    award_name: Optional[str] = Field(None, min_length=1, max_length=255)
    award_rank: Optional[str] = Field(None, max_length=100)
    award_time: Optional[datetime] = None
    certificate_image: Optional[str] = None
    description: Optional[str] = None

    @field_validator("award_time")
    @classmethod
    def normalize_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class AwardCompetition(CamelModel):
    id: int
    title: str


class AwardResponse(CamelModel):
    id: int
    user_id: int
    competition_id: Optional[int] = None
    award_level: AwardLevel
    award_name: str
    award_rank: Optional[str] = None
    award_time: datetime
    certificate_image: Optional[str] = None
    certificate_number: Optional[str] = None
    description: Optional[str] = None
    status: AwardStatus
    issued_by: Optional[int] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    competition: Optional[AwardCompetition] = None
    user: Optional[UserSummary] = None


class AwardListData(CamelModel):
    awards: List[AwardResponse]
    pagination: Pagination
