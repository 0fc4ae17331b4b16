"""
Custom Exceptions for the Contest Portal
========================================

Every domain failure is raised as a PortalError subclass carrying a message,
a machine-readable code and the HTTP status it maps to. The handlers in
contest_portal.main translate them into the JSON error envelope:

    {"success": false, "message": "...", "code": "..."}

Usage:
    from contest_portal.core.exceptions import CompetitionNotFoundError

    if not competition:
        raise CompetitionNotFoundError(competition_id)
"""

from typing import Optional, Any, Dict


class PortalError(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Validation Errors (400)
# ============================================

class ValidationError(PortalError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidFileTypeError(ValidationError):
    """Uploaded file type not allowed"""

    def __init__(self, filename: str, content_type: Optional[str], allowed_types: list):
        super().__init__(f"Unsupported file type: {filename}")
        self.code = "INVALID_FILE_TYPE"
        self.details = {
            "filename": filename,
            "content_type": content_type,
            "allowed_types": sorted(allowed_types),
        }


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds the size limit"""

    def __init__(self, filename: str, max_bytes: int):
        super().__init__(
            f"File '{filename}' exceeds the maximum size of {max_bytes // 1024 // 1024}MB"
        )
        self.code = "FILE_TOO_LARGE"
        self.details = {"filename": filename, "max_bytes": max_bytes}


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(PortalError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidTokenError(AuthenticationError):
    """JWT token is missing, malformed or expired"""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


class InvalidCredentialsError(AuthenticationError):
    """Login identifier or password did not match"""

    def __init__(self):
        super().__init__("Incorrect account or password")
        self.code = "INVALID_CREDENTIALS"


class AuthorizationError(PortalError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors (404)
# ============================================

class ResourceNotFoundError(PortalError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: Any):
        super().__init__("User", user_id)


class CompetitionNotFoundError(ResourceNotFoundError):
    def __init__(self, competition_id: Any):
        super().__init__("Competition", competition_id)


class RegistrationNotFoundError(ResourceNotFoundError):
    def __init__(self, registration_id: Any):
        super().__init__("Registration", registration_id)


class AwardNotFoundError(ResourceNotFoundError):
    def __init__(self, award_id: Any):
        super().__init__("Award", award_id)


class NotificationNotFoundError(ResourceNotFoundError):
    def __init__(self, notification_id: Any):
        super().__init__("Notification", notification_id)


# ============================================
# Workflow Errors (400)
# ============================================

class ConflictError(PortalError):
    """A unique key already exists"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class InvalidStateError(PortalError):
    """Operation not valid for the entity's current status"""

    status_code = 400

    def __init__(self, message: str, current_status: Optional[str] = None):
        details = {"current_status": current_status} if current_status else {}
        super().__init__(message, code="INVALID_STATE", details=details)


class CapacityExceededError(PortalError):
    """Competition already has its maximum number of approved participants"""

    status_code = 400

    def __init__(self, max_participants: int):
        super().__init__(
            "Registration is full",
            code="CAPACITY_EXCEEDED",
            details={"max_participants": max_participants}
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: PortalError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "message": error.message,
        "code": error.code,
    }
