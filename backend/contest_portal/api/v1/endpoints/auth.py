from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from contest_portal.core.database import get_db
from contest_portal.core.exceptions import PortalError
from contest_portal.core.logging_config import logger, set_user_id
from contest_portal.core.rate_limiter import limiter, login_rate_limit, register_rate_limit
from contest_portal.core.security import build_token_claims, create_access_token
from contest_portal.models.user import User
from contest_portal.modules.auth.dependencies import get_current_user
from contest_portal.schemas.auth import AuthData, UserLogin, UserRegister, UserResponse
from contest_portal.schemas.common import ApiResponse
from contest_portal.services import user_service

router = APIRouter()


def _auth_payload(user: User) -> AuthData:
    return AuthData(
        user=UserResponse.model_validate(user),
        token=create_access_token(build_token_claims(user)),
    )


@router.post("/register", response_model=ApiResponse[AuthData], status_code=status.HTTP_201_CREATED)
@limiter.limit(register_rate_limit)
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a new account and return it with an access token"""
    client_ip = request.client.host if request.client else "unknown"

    try:
        user = await user_service.register_user(db, user_data)
    except PortalError as e:
        logger.log_auth_event(
            "register", False, identifier=user_data.email, reason=e.message, client_ip=client_ip
        )
        raise

    logger.log_auth_event("register", True, identifier=user_data.email, client_ip=client_ip, user_id=user.id)
    return ApiResponse[AuthData](data=_auth_payload(user), message="Registration successful")


@router.post("/login", response_model=ApiResponse[AuthData])
@limiter.limit(login_rate_limit)
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Log in with student ID, phone or email"""
    client_ip = request.client.host if request.client else "unknown"
    identifier = credentials.identifier

    try:
        user = await user_service.authenticate(db, identifier, credentials.password)
    except PortalError as e:
        logger.log_auth_event("login", False, identifier=identifier, reason=e.message, client_ip=client_ip)
        raise

    set_user_id(str(user.id))
    logger.log_auth_event("login", True, identifier=identifier, client_ip=client_ip, user_id=user.id)
    return ApiResponse[AuthData](data=_auth_payload(user), message="Login successful")


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user"""
    return ApiResponse[UserResponse](data=UserResponse.model_validate(current_user))
