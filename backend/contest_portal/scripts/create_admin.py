"""
Create (or promote) an administrator account.

Reads ADMIN_USERNAME, ADMIN_EMAIL, ADMIN_PASSWORD and optionally ADMIN_ROLE
(admin | super_admin), ADMIN_STUDENT_ID and ADMIN_REALNAME from the
environment. If a user with the same username, email or student ID exists
it is promoted and re-activated instead of creating a new one.

Usage:
    ADMIN_USERNAME=root ADMIN_EMAIL=root@example.com ADMIN_PASSWORD=secret1 \
        python -m contest_portal.scripts.create_admin
"""

import asyncio
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from contest_portal.core.config import settings
from contest_portal.core.database import close_db, get_session_local, init_db
from contest_portal.core.logging_config import logger
from contest_portal.core.security import get_password_hash
from contest_portal.models.user import User, UserRole, UserStatus

ADMIN_ROLES = (UserRole.ADMIN, UserRole.SUPER_ADMIN)


@dataclass
class AdminConfig:
    username: str
    email: str
    password: str
    role: UserRole = UserRole.ADMIN
    student_id: Optional[str] = None
    real_name: Optional[str] = None


def _required(environ: Mapping[str, str], name: str) -> str:
    value = (environ.get(name) or "").strip()
    if not value:
        raise ValueError(f"Missing environment variable: {name}")
    return value


def load_admin_config(environ: Mapping[str, str] = os.environ) -> AdminConfig:
    role_name = (environ.get("ADMIN_ROLE") or "admin").strip()
    try:
        role = UserRole(role_name)
    except ValueError:
        role = None
    if role not in ADMIN_ROLES:
        raise ValueError("ADMIN_ROLE must be admin or super_admin")

    password = _required(environ, "ADMIN_PASSWORD")
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValueError(f"ADMIN_PASSWORD must be at least {settings.PASSWORD_MIN_LENGTH} characters")

    return AdminConfig(
        username=_required(environ, "ADMIN_USERNAME"),
        email=_required(environ, "ADMIN_EMAIL"),
        password=password,
        role=role,
        student_id=(environ.get("ADMIN_STUDENT_ID") or "").strip() or None,
        real_name=(environ.get("ADMIN_REALNAME") or "").strip() or None,
    )


async def create_or_promote_admin(db: AsyncSession, config: AdminConfig) -> Tuple[User, bool]:
    """Returns (user, created)"""
    conditions = [User.username == config.username, User.email == config.email]
    if config.student_id:
        conditions.append(User.student_id == config.student_id)

    result = await db.execute(select(User).where(or_(*conditions)).order_by(User.id).limit(1))
    existing = result.scalar_one_or_none()

    if existing:
        # Re-running the script only promotes; the password is left alone
        existing.role = config.role
        existing.status = UserStatus.ACTIVE
        await db.commit()
        await db.refresh(existing)
        return existing, False

    user = User(
        username=config.username,
        email=config.email,
        hashed_password=get_password_hash(config.password),
        student_id=config.student_id,
        real_name=config.real_name,
        role=config.role,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user, True


async def main() -> int:
    try:
        config = load_admin_config()
    except ValueError as e:
        logger.error(str(e))
        return 1

    await init_db()
    try:
        async with get_session_local()() as db:
            user, created = await create_or_promote_admin(db, config)
    finally:
        await close_db()

    action = "Created" if created else "Promoted existing"
    print(f"{action} {user.role.value}: id={user.id} username={user.username} email={user.email}")
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
