from contest_portal.modules.auth.dependencies import (
    get_current_user,
    get_current_admin,
    get_user_from_token,
)

__all__ = ["get_current_user", "get_current_admin", "get_user_from_token"]
