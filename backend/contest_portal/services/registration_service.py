"""
Registration workflow: submit, list, cancel and attach materials.

The (user, competition) pair is unique in storage; the lookup before the
insert only gives a friendlier error for the common case.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from contest_portal.core.config import settings
from contest_portal.core.exceptions import (
    AuthorizationError,
    CapacityExceededError,
    ConflictError,
    InvalidStateError,
    PortalError,
    RegistrationNotFoundError,
    ValidationError,
)
from contest_portal.core.logging_config import logger
from contest_portal.models.registration import Registration, RegistrationStatus
from contest_portal.models.user import User
from contest_portal.schemas.common import PageParams
from contest_portal.schemas.registration import RegistrationCreate
from contest_portal.services import storage
from contest_portal.services.competition_service import count_registrations, get_competition
from contest_portal.utils.pagination import paginate


def registration_options():
    return (selectinload(Registration.competition), selectinload(Registration.user))


async def get_registration(db: AsyncSession, registration_id: int) -> Registration:
    result = await db.execute(
        select(Registration)
        .where(Registration.id == registration_id)
        .options(*registration_options())
        .execution_options(populate_existing=True)
    )
    registration = result.scalar_one_or_none()
    if not registration:
        raise RegistrationNotFoundError(registration_id)
    return registration


async def already_registered(db: AsyncSession, user_id: int, competition_id: int) -> bool:
    existing = await db.execute(
        select(Registration.id).where(
            Registration.user_id == user_id,
            Registration.competition_id == competition_id,
        )
    )
    return existing.scalar_one_or_none() is not None


async def create_registration(db: AsyncSession, user: User, data: RegistrationCreate) -> Registration:
    competition = await get_competition(db, data.competition_id)

    if not competition.is_registration_open(datetime.utcnow()):
        raise InvalidStateError("Not within the registration period", current_status=competition.status.value)

    parts = storage.material_parts(competition.id, user.id)
    for attachment in data.attachments or []:
        if not storage.upload_url_within(attachment.url, parts):
            raise ValidationError("Attachments must be your own uploaded materials", field="attachments")

    if await already_registered(db, user.id, competition.id):
        raise ConflictError("You have already registered for this competition")

    if competition.max_participants > 0:
        approved = await count_registrations(db, competition.id, RegistrationStatus.APPROVED)
        if approved >= competition.max_participants:
            raise CapacityExceededError(competition.max_participants)

    registration = Registration(
        user_id=user.id,
        competition_id=competition.id,
        status=RegistrationStatus.PENDING,
        registration_data=data.registration_data,
        attachments=[a.model_dump(by_alias=True) for a in data.attachments or []],
    )
    db.add(registration)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("You have already registered for this competition")

    logger.info(
        f"User {user.id} registered for competition {competition.id}",
        extra={"event_type": "registration_created", "registration_id": registration.id},
    )
    return await get_registration(db, registration.id)


async def list_user_registrations(
    db: AsyncSession,
    user: User,
    params: PageParams,
    status: Optional[RegistrationStatus] = None,
) -> Tuple[list, int]:
    query = select(Registration).where(Registration.user_id == user.id)
    if status:
        query = query.where(Registration.status == status)
    query = query.order_by(Registration.created_at.desc(), Registration.id.desc())
    return await paginate(db, query, params, *registration_options())


async def list_competition_registrations(
    db: AsyncSession,
    competition_id: int,
    params: PageParams,
    status: Optional[RegistrationStatus] = None,
) -> Tuple[list, int]:
    await get_competition(db, competition_id)

    query = select(Registration).where(Registration.competition_id == competition_id)
    if status:
        query = query.where(Registration.status == status)
    query = query.order_by(Registration.created_at.desc(), Registration.id.desc())
    return await paginate(db, query, params, *registration_options())


async def get_registration_for(db: AsyncSession, registration_id: int, user: User) -> Registration:
    """Owners and reviewers may read a registration"""
    registration = await get_registration(db, registration_id)
    if registration.user_id != user.id and not user.is_reviewer:
        raise AuthorizationError("You cannot view this registration")
    return registration


async def _get_owned(db: AsyncSession, registration_id: int, user: User) -> Registration:
    registration = await get_registration(db, registration_id)
    if registration.user_id != user.id:
        raise AuthorizationError("You can only modify your own registration")
    return registration


async def cancel_registration(db: AsyncSession, registration_id: int, user: User) -> Registration:
    registration = await _get_owned(db, registration_id, user)

    if registration.status == RegistrationStatus.CANCELLED:
        raise InvalidStateError("Registration already cancelled", current_status=registration.status.value)

    registration.status = RegistrationStatus.CANCELLED
    await db.commit()

    logger.info(
        f"User {user.id} cancelled registration {registration.id}",
        extra={"event_type": "registration_cancelled", "registration_id": registration.id},
    )
    return await get_registration(db, registration.id)


async def add_materials(
    db: AsyncSession,
    registration_id: int,
    user: User,
    files: List[UploadFile],
) -> Registration:
    """
    Store uploaded materials in order and append them to the attachments.

    Files accepted before a rejected one are kept and recorded; the rejected
    file is discarded and its error raised; later files are not processed.
    """
    registration = await _get_owned(db, registration_id, user)

    files = [f for f in files or [] if f is not None]
    if not files:
        raise ValidationError("No files uploaded", field="files")
    if len(files) > settings.MAX_MATERIAL_FILES:
        raise ValidationError(
            f"At most {settings.MAX_MATERIAL_FILES} files can be uploaded at once", field="files"
        )

    stored = []
    failure: Optional[PortalError] = None
    for upload in files:
        try:
            saved = await storage.save_upload(
                upload,
                storage.material_parts(registration.competition_id, user.id),
                storage.MATERIAL_TYPES,
            )
        except PortalError as e:
            failure = e
            break
        stored.append(saved.to_attachment())

    if stored:
        # Assign a new list so the JSON column is flagged as changed
        registration.attachments = list(registration.attachments or []) + stored
        await db.commit()
        logger.info(
            f"Added {len(stored)} material file(s) to registration {registration.id}",
            extra={"event_type": "materials_uploaded", "registration_id": registration.id},
        )

    if failure is not None:
        raise failure

    return await get_registration(db, registration.id)
