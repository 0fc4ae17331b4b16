from contest_portal.schemas.common import ApiResponse, CamelModel, Pagination, PageParams
from contest_portal.schemas.auth import UserRegister, UserLogin, UserResponse, AuthData
from contest_portal.schemas.user import ProfileUpdate, PasswordChange, UserSummary
from contest_portal.schemas.competition import (
    CompetitionCreate,
    CompetitionUpdate,
    CompetitionResponse,
    CompetitionDetail,
    CompetitionListData,
    CompetitionSortField,
    SortOrder,
)
from contest_portal.schemas.registration import (
    Attachment,
    RegistrationCreate,
    RegistrationResponse,
    RegistrationListData,
)
from contest_portal.schemas.award import AwardUpdate, AwardResponse, AwardListData
from contest_portal.schemas.notification import (
    NotificationResponse,
    NotificationPush,
    NotificationListData,
    MarkAllReadData,
)
from contest_portal.schemas.admin import (
    ReviewDecision,
    ReviewRequest,
    RoleUpdate,
    AdminUserListData,
    StatisticsResponse,
)

__all__ = [
    "ApiResponse",
    "CamelModel",
    "Pagination",
    "PageParams",
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "AuthData",
    "ProfileUpdate",
    "PasswordChange",
    "UserSummary",
    "CompetitionCreate",
    "CompetitionUpdate",
    "CompetitionResponse",
    "CompetitionDetail",
    "CompetitionListData",
    "CompetitionSortField",
    "SortOrder",
    "Attachment",
    "RegistrationCreate",
    "RegistrationResponse",
    "RegistrationListData",
    "AwardUpdate",
    "AwardResponse",
    "AwardListData",
    "NotificationResponse",
    "NotificationPush",
    "NotificationListData",
    "MarkAllReadData",
    "ReviewDecision",
    "ReviewRequest",
    "RoleUpdate",
    "AdminUserListData",
    "StatisticsResponse",
]
