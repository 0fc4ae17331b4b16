"""
Award workflow: user-submitted awards and administrator-issued college certificates.

School, provincial and national awards are submitted by users and wait for
review. College awards are issued by an administrator, start approved and
carry a generated certificate number.
"""

import secrets
from datetime import datetime
from typing import Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from contest_portal.core.config import settings
from contest_portal.core.exceptions import (
    AuthorizationError,
    AwardNotFoundError,
    ConflictError,
    InvalidStateError,
    UserNotFoundError,
    ValidationError,
)
from contest_portal.core.logging_config import logger
from contest_portal.models.award import Award, AwardLevel, AwardStatus, SELF_SUBMITTED_LEVELS
from contest_portal.models.notification import NotificationType
from contest_portal.models.user import User
from contest_portal.schemas.award import AwardUpdate
from contest_portal.schemas.common import PageParams, to_naive_utc
from contest_portal.services import storage
from contest_portal.services.competition_service import get_competition
from contest_portal.services.notification_service import dispatch
from contest_portal.utils.pagination import paginate

CERTIFICATE_NUMBER_ATTEMPTS = 5


def award_options():
    return (selectinload(Award.competition), selectinload(Award.user))


def generate_certificate_number(now: Optional[datetime] = None) -> str:
    """COLLEGE-YYYYMMDD-NNNN"""
    now = now or datetime.utcnow()
    return f"COLLEGE-{now:%Y%m%d}-{secrets.randbelow(10000):04d}"


async def resolve_certificate(
    certificate_url: Optional[str],
    upload: Optional[UploadFile],
    category: str,
    allowed_types,
    max_size: int,
) -> Optional[str]:
    """
    Pick the certificate location: a non-empty URL wins, otherwise the
    uploaded file is stored. An upload that loses to a URL is not written.
    """
    if certificate_url and certificate_url.strip():
        return certificate_url.strip()
    if upload is not None and upload.filename:
        saved = await storage.save_upload(upload, (category,), allowed_types, max_size=max_size)
        return saved.url
    return None


async def get_award(db: AsyncSession, award_id: int) -> Award:
    result = await db.execute(
        select(Award)
        .where(Award.id == award_id)
        .options(*award_options())
        .execution_options(populate_existing=True)
    )
    award = result.scalar_one_or_none()
    if not award:
        raise AwardNotFoundError(award_id)
    return award


async def create_award(
    db: AsyncSession,
    user: User,
    award_level: AwardLevel,
    award_name: str,
    award_time: datetime,
    competition_id: Optional[int] = None,
    award_rank: Optional[str] = None,
    description: Optional[str] = None,
    certificate_image: Optional[str] = None,
    certificate: Optional[UploadFile] = None,
) -> Award:
    if award_level not in SELF_SUBMITTED_LEVELS:
        raise ValidationError("Invalid award level", field="awardLevel")
    if not award_name or not award_name.strip():
        raise ValidationError("Award name is required", field="awardName")

    if competition_id:
        await get_competition(db, competition_id)

    if not (certificate_image and certificate_image.strip()) and (certificate is None or not certificate.filename):
        raise ValidationError("Certificate image is required", field="certificate")

    url = await resolve_certificate(
        certificate_image, certificate, "awards", storage.IMAGE_TYPES, settings.MAX_IMAGE_SIZE
    )

    award = Award(
        user_id=user.id,
        competition_id=competition_id or None,
        award_level=award_level,
        award_name=award_name.strip(),
        award_rank=award_rank,
        award_time=to_naive_utc(award_time),
        certificate_image=url,
        description=description,
        status=AwardStatus.PENDING,
    )
    db.add(award)
    await db.commit()

    logger.info(
        f"User {user.id} submitted {award_level.value} award {award.id}",
        extra={"event_type": "award_submitted", "award_id": award.id},
    )
    return await get_award(db, award.id)


async def list_user_awards(
    db: AsyncSession,
    user: User,
    params: PageParams,
    award_level: Optional[AwardLevel] = None,
    status: Optional[AwardStatus] = None,
) -> Tuple[list, int]:
    query = select(Award).where(Award.user_id == user.id)
    if award_level:
        query = query.where(Award.award_level == award_level)
    if status:
        query = query.where(Award.status == status)
    query = query.order_by(Award.award_time.desc(), Award.id.desc())
    return await paginate(db, query, params, *award_options())


async def list_all_awards(
    db: AsyncSession,
    params: PageParams,
    award_level: Optional[AwardLevel] = None,
    status: Optional[AwardStatus] = None,
) -> Tuple[list, int]:
    query = select(Award)
    if award_level:
        query = query.where(Award.award_level == award_level)
    if status:
        query = query.where(Award.status == status)
    query = query.order_by(Award.created_at.desc(), Award.id.desc())
    return await paginate(db, query, params, *award_options())


async def get_award_for(db: AsyncSession, award_id: int, user: User) -> Award:
    award = await get_award(db, award_id)
    if award.user_id != user.id and not user.is_reviewer:
        raise AuthorizationError("You cannot view this award")
    return award


async def _get_pending_owned(db: AsyncSession, award_id: int, user: User) -> Award:
    award = await get_award(db, award_id)
    if award.user_id != user.id:
        raise AuthorizationError("You can only modify your own awards")
    if award.status != AwardStatus.PENDING:
        raise InvalidStateError("Only pending awards can be changed", current_status=award.status.value)
    return award


async def update_award(db: AsyncSession, award_id: int, user: User, data: AwardUpdate) -> Award:
    award = await _get_pending_owned(db, award_id, user)
    changes = data.model_dump(exclude_unset=True)

    if "award_level" in changes and changes["award_level"] not in SELF_SUBMITTED_LEVELS:
        raise ValidationError("Invalid award level", field="awardLevel")
    for field in ("award_level", "award_name", "award_time", "certificate_image"):
        if field in changes and not changes[field]:
            raise ValidationError(f"{field} cannot be empty", field=field)
    if changes.get("competition_id"):
        await get_competition(db, changes["competition_id"])

    for field, value in changes.items():
        setattr(award, field, value)

    await db.commit()
    return await get_award(db, award.id)


async def delete_award(db: AsyncSession, award_id: int, user: User) -> None:
    award = await _get_pending_owned(db, award_id, user)
    await db.delete(award)
    await db.commit()


async def issue_college_certificate(
    db: AsyncSession,
    issuer: User,
    user_id: int,
    award_name: str,
    award_time: datetime,
    competition_id: Optional[int] = None,
    award_rank: Optional[str] = None,
    description: Optional[str] = None,
    certificate_image: Optional[str] = None,
    certificate: Optional[UploadFile] = None,
) -> Award:
    """Create an approved college-level award and notify its recipient"""
    if not award_name or not award_name.strip():
        raise ValidationError("Award name is required", field="awardName")

    recipient = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if not recipient:
        raise UserNotFoundError(user_id)
    if competition_id:
        await get_competition(db, competition_id)

    if not (certificate_image and certificate_image.strip()) and (certificate is None or not certificate.filename):
        raise ValidationError(
            "A certificate file (pdf or image) or URL is required", field="certificate"
        )

    # A rollback on collision expires loaded objects; keep plain ids
    recipient_id, issuer_id = recipient.id, issuer.id

    url = await resolve_certificate(
        certificate_image, certificate, "certificates", storage.ADMIN_CERTIFICATE_TYPES,
        settings.MAX_UPLOAD_SIZE,
    )

    award = None
    for attempt in range(1, CERTIFICATE_NUMBER_ATTEMPTS + 1):
        award = Award(
            user_id=recipient_id,
            competition_id=competition_id or None,
            award_level=AwardLevel.COLLEGE,
            award_name=award_name.strip(),
            award_rank=award_rank,
            award_time=to_naive_utc(award_time),
            certificate_image=url,
            certificate_number=generate_certificate_number(),
            description=description,
            status=AwardStatus.APPROVED,
            issued_by=issuer_id,
        )
        db.add(award)
        try:
            await db.flush()
            break
        except IntegrityError:
            await db.rollback()
            logger.warning(
                f"Certificate number collision on attempt {attempt}",
                extra={"event_type": "certificate_number_collision", "attempt": attempt},
            )
    else:
        raise ConflictError("Could not allocate a unique certificate number")

    award_id, certificate_number = award.id, award.certificate_number
    await db.commit()

    logger.info(
        f"Certificate {certificate_number} issued to user {recipient_id} by user {issuer_id}",
        extra={"event_type": "certificate_issued", "award_id": award_id},
    )

    await dispatch(
        db,
        recipient_id,
        NotificationType.CERTIFICATE_ISSUED,
        "College award certificate",
        f"You have been awarded a college certificate: {award_name.strip()}",
    )
    return await get_award(db, award_id)
