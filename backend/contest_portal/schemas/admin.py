from pydantic import Field
from typing import Dict, List, Optional
from enum import Enum

from contest_portal.models.user import UserRole
from contest_portal.schemas.auth import UserResponse
from contest_portal.schemas.common import CamelModel, Pagination


class ReviewDecision(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewRequest(CamelModel):
    status: ReviewDecision
    review_notes: Optional[str] = Field(None, max_length=2000)


class RoleUpdate(CamelModel):
    role: UserRole


class AdminUserListData(CamelModel):
    users: List[UserResponse]
    pagination: Pagination


class StatisticsResponse(CamelModel):
    total_users: int
    total_competitions: int
    total_registrations: int
    total_awards: int
    awards_by_level: Dict[str, int]
    registrations_by_status: Dict[str, int]
