"""
User accounts: registration, login, profile maintenance and role changes.
"""

from typing import Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contest_portal.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidCredentialsError,
    InvalidStateError,
    UserNotFoundError,
    ValidationError,
)
from contest_portal.core.logging_config import logger
from contest_portal.core.security import get_password_hash, verify_password
from contest_portal.models.user import User, UserRole, UserStatus
from contest_portal.schemas.auth import UserRegister
from contest_portal.schemas.common import PageParams
from contest_portal.schemas.user import PasswordChange, ProfileUpdate
from contest_portal.utils.pagination import paginate


# Roles each actor role may hand out
ASSIGNABLE_ROLES = {
    UserRole.ADMIN: frozenset({UserRole.USER, UserRole.ADMIN}),
    UserRole.SUPER_ADMIN: frozenset({UserRole.USER, UserRole.ADMIN, UserRole.SUPER_ADMIN}),
}


async def identity_taken(db: AsyncSession, data: UserRegister) -> bool:
    """Fast-path lookup; the unique columns are the real guard"""
    conditions = [User.username == data.username, User.email == data.email]
    if data.student_id:
        conditions.append(User.student_id == data.student_id)

    result = await db.execute(select(User.id).where(or_(*conditions)).limit(1))
    return result.scalar_one_or_none() is not None


async def register_user(db: AsyncSession, data: UserRegister) -> User:
    if await identity_taken(db, data):
        raise ConflictError("Username, email or student ID already exists")

    user = User(
        username=data.username,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        phone=data.phone,
        real_name=data.real_name,
        student_id=data.student_id,
        role=UserRole.USER,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Username, email or student ID already exists")

    await db.refresh(user)
    return user


async def authenticate(db: AsyncSession, identifier: str, password: str) -> User:
    """
    Find an active user whose student ID, phone or email equals `identifier`
    and whose password matches. Every failure looks the same to the caller.
    """
    result = await db.execute(
        select(User)
        .where(
            or_(
                User.student_id == identifier,
                User.phone == identifier,
                User.email == identifier,
            ),
            User.status == UserStatus.ACTIVE,
        )
        .order_by(User.id)
    )
    candidates = result.scalars().all()

    for user in candidates:
        if verify_password(password, user.hashed_password):
            return user

    raise InvalidCredentialsError()


async def ensure_student_id_free(db: AsyncSession, student_id: str, user_id: int) -> None:
    result = await db.execute(
        select(User.id).where(User.student_id == student_id, User.id != user_id)
    )
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Student ID already exists")


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
    changes = data.model_dump(exclude_unset=True)

    if changes.get("student_id"):
        await ensure_student_id_free(db, changes["student_id"], user.id)

    for field, value in changes.items():
        setattr(user, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Student ID already exists")

    await db.refresh(user)
    return user


async def change_password(db: AsyncSession, user: User, data: PasswordChange) -> None:
    if not verify_password(data.old_password, user.hashed_password):
        raise ValidationError("Old password is incorrect", field="oldPassword")

    user.hashed_password = get_password_hash(data.new_password)
    await db.commit()
    logger.log_auth_event("password_change", True, identifier=str(user.id))


async def list_users(
    db: AsyncSession,
    params: PageParams,
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
) -> Tuple[list, int]:
    query = select(User)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                User.username.ilike(pattern),
                User.email.ilike(pattern),
                User.real_name.ilike(pattern),
                User.student_id.ilike(pattern),
            )
        )
    if role:
        query = query.where(User.role == role)

    return await paginate(db, query.order_by(User.created_at.desc(), User.id.desc()), params)


def check_role_change(actor: User, target: User, new_role: UserRole) -> None:
    """
    Enforce the role assignment table.

    admin        -> user, admin; never touches a current super_admin
    super_admin  -> user, admin, super_admin; cannot demote themself
    """
    allowed = ASSIGNABLE_ROLES.get(actor.role, frozenset())

    if new_role not in allowed:
        raise AuthorizationError("You are not allowed to assign this role")

    if actor.role != UserRole.SUPER_ADMIN and target.role == UserRole.SUPER_ADMIN:
        raise AuthorizationError("Only a super admin can change a super admin's role")

    if actor.id == target.id and actor.role == UserRole.SUPER_ADMIN and new_role != UserRole.SUPER_ADMIN:
        raise InvalidStateError("A super admin cannot demote themself", current_status=actor.role.value)


async def update_user_role(db: AsyncSession, actor: User, target_id: int, new_role: UserRole) -> User:
    result = await db.execute(select(User).where(User.id == target_id))
    target = result.scalar_one_or_none()
    if not target:
        raise UserNotFoundError(target_id)

    check_role_change(actor, target, new_role)

    previous = target.role
    target.role = new_role
    await db.commit()
    await db.refresh(target)

    logger.info(
        f"Role of user {target.id} changed {previous.value} -> {new_role.value} by user {actor.id}",
        extra={
            "event_type": "role_change",
            "target_user_id": target.id,
            "previous_role": previous.value,
            "new_role": new_role.value,
            "actor_id": actor.id,
        },
    )
    return target
