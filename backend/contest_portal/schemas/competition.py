from pydantic import Field, field_validator, model_validator
from typing import Any, List, Optional
from datetime import datetime
from enum import Enum

from contest_portal.models.competition import CompetitionStatus
from contest_portal.schemas.common import CamelModel, Pagination, to_naive_utc


class CompetitionSortField(str, Enum):
    """Columns the competition list may be ordered by"""
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    TITLE = "title"
    TYPE = "type"
    STATUS = "status"
    REGISTRATION_START = "registrationStart"
    REGISTRATION_END = "registrationEnd"
    START_TIME = "startTime"
    END_TIME = "endTime"
    MAX_PARTICIPANTS = "maxParticipants"
    CURRENT_PARTICIPANTS = "currentParticipants"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


_TIME_FIELDS = ("registration_start", "registration_end", "start_time", "end_time")


class CompetitionBase(CamelModel):
    description: Optional[str] = None
    cover_image: Optional[str] = None
    requirements: Optional[Any] = None
    rules: Optional[Any] = None
    awards: Optional[Any] = None


class CompetitionCreate(CompetitionBase):
    title: str = Field(..., min_length=1, max_length=255)
    type: str = Field("other", min_length=1, max_length=50)
    registration_start: datetime
    registration_end: datetime
    start_time: datetime
    end_time: datetime
    max_participants: int = Field(0, ge=0)
    status: CompetitionStatus = CompetitionStatus.DRAFT

    @field_validator(*_TIME_FIELDS)
    @classmethod
    def normalize_times(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_windows(self):
        if self.registration_start > self.registration_end:
            raise ValueError("registrationStart must not be after registrationEnd")
        if self.start_time > self.end_time:
            raise ValueError("startTime must not be after endTime")
        return self


class CompetitionUpdate(CompetitionBase):
    """Partial update; only fields present in the payload are applied"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    registration_start: Optional[datetime] = None
    registration_end: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    max_participants: Optional[int] = Field(None, ge=0)
    status: Optional[CompetitionStatus] = None

    @field_validator(*_TIME_FIELDS)
    @classmethod
    def normalize_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class CreatorSummary(CamelModel):
    id: int
    username: str
    real_name: Optional[str] = None


class CompetitionResponse(CompetitionBase):
    id: int
    title: str
    type: str
    registration_start: datetime
    registration_end: datetime
    start_time: datetime
    end_time: datetime
    max_participants: int
    current_participants: int
    status: CompetitionStatus
    created_by: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    creator: Optional[CreatorSummary] = None


class CompetitionDetail(CompetitionResponse):
    registration_count: int = 0
    # Live count of approved registrations; currentParticipants only ever grows
    approved_count: int = 0


class CompetitionBrief(CamelModel):
    id: int
    title: str
    type: str
    status: CompetitionStatus
    registration_start: datetime
    registration_end: datetime
    start_time: datetime
    end_time: datetime


class CompetitionListData(CamelModel):
    competitions: List[CompetitionResponse]
    pagination: Pagination
