# Re-export all models for convenient imports
from contest_portal.models.user import User, UserRole, UserStatus, REVIEWER_ROLES
from contest_portal.models.competition import Competition, CompetitionStatus
from contest_portal.models.registration import Registration, RegistrationStatus
from contest_portal.models.award import Award, AwardLevel, AwardStatus, SELF_SUBMITTED_LEVELS
from contest_portal.models.notification import Notification, NotificationType

__all__ = [
    # User
    "User",
    "UserRole",
    "UserStatus",
    "REVIEWER_ROLES",
    # Competition
    "Competition",
    "CompetitionStatus",
    # Registration
    "Registration",
    "RegistrationStatus",
    # Award
    "Award",
    "AwardLevel",
    "AwardStatus",
    "SELF_SUBMITTED_LEVELS",
    # Notification
    "Notification",
    "NotificationType",
]
