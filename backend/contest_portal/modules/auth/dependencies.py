from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from contest_portal.core.database import get_db
from contest_portal.core.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError
from contest_portal.core.logging_config import set_user_id
from contest_portal.core.security import decode_token
from contest_portal.models.user import User, REVIEWER_ROLES

# auto_error=False so a missing header is reported as 401 instead of 403
security = HTTPBearer(auto_error=False)


async def get_user_from_token(token: str, db: AsyncSession) -> User:
    """
    Resolve a bearer token to an active user.

    Role and status are always read from the database, so a token issued
    before a role change carries no stale privileges.
    """
    payload = decode_token(token)

    user_id = payload.get("id", payload.get("sub"))
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise InvalidTokenError("Invalid token payload")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise InvalidTokenError("User not found")

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    user = await get_user_from_token(credentials.credentials, db)
    set_user_id(str(user.id))
    return user


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current admin or super admin"""
    if current_user.role not in REVIEWER_ROLES:
        raise AuthorizationError("Admin access required")
    return current_user
