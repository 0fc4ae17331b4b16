"""
Review engine shared by registrations and awards.

A review records the decision, reviewer, time and notes, then notifies the
submitter once the decision is committed. Approving a registration re-checks
the capacity cap and bumps the competition's participant counter inside the
same transaction, with the competition row locked. A failed notification
never undoes the review.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from contest_portal.core.exceptions import CapacityExceededError, InvalidStateError
from contest_portal.core.logging_config import logger
from contest_portal.models.award import Award, AwardStatus
from contest_portal.models.notification import NotificationType
from contest_portal.models.registration import Registration, RegistrationStatus
from contest_portal.models.user import User
from contest_portal.schemas.admin import ReviewDecision
from contest_portal.services.award_service import get_award
from contest_portal.services.competition_service import count_registrations, get_competition
from contest_portal.services.notification_service import dispatch
from contest_portal.services.registration_service import get_registration

_OUTCOME = {
    ReviewDecision.APPROVED: "approved",
    ReviewDecision.REJECTED: "rejected",
}


async def review_registration(
    db: AsyncSession,
    registration_id: int,
    decision: ReviewDecision,
    reviewer: User,
    notes: Optional[str] = None,
) -> Registration:
    registration = await get_registration(db, registration_id)
    competition = await get_competition(db, registration.competition_id, lock=True)
    reviewer_id = reviewer.id

    entering_approved = (
        decision == ReviewDecision.APPROVED
        and registration.status != RegistrationStatus.APPROVED
    )

    if entering_approved:
        if competition.max_participants > 0:
            approved = await count_registrations(
                db, competition.id, RegistrationStatus.APPROVED, exclude_id=registration.id
            )
            if approved >= competition.max_participants:
                raise CapacityExceededError(competition.max_participants)
        # Audit counter: never decremented by later rejection or cancellation
        competition.current_participants = (competition.current_participants or 0) + 1

    registration.status = RegistrationStatus(decision.value)
    registration.reviewed_by = reviewer_id
    registration.reviewed_at = datetime.utcnow()
    registration.review_notes = notes

    # A failed dispatch rolls back and expires these objects
    registration_id, owner_id = registration.id, registration.user_id
    competition_id, competition_title = competition.id, competition.title

    await db.commit()

    logger.log_review_event(
        "registration",
        registration_id,
        decision.value,
        reviewer_id,
        competition_id=competition_id,
        counter_incremented=entering_approved,
    )

    await dispatch(
        db,
        owner_id,
        NotificationType.REGISTRATION_REVIEW,
        "Registration review result",
        f'Your registration for "{competition_title}" has been {_OUTCOME[decision]}',
    )
    return await get_registration(db, registration_id)


async def review_award(
    db: AsyncSession,
    award_id: int,
    decision: ReviewDecision,
    reviewer: User,
    notes: Optional[str] = None,
) -> Award:
    award = await get_award(db, award_id)

    if not award.is_reviewable:
        raise InvalidStateError("College-level awards do not require review", current_status=award.status.value)

    reviewer_id = reviewer.id
    award.status = AwardStatus(decision.value)
    award.reviewed_by = reviewer_id
    award.reviewed_at = datetime.utcnow()
    award.review_notes = notes

    award_id, owner_id, award_name = award.id, award.user_id, award.award_name
    await db.commit()

    logger.log_review_event("award", award_id, decision.value, reviewer_id)

    await dispatch(
        db,
        owner_id,
        NotificationType.AWARD_REVIEW,
        "Award review result",
        f'Your award "{award_name}" has been {_OUTCOME[decision]}',
    )
    return await get_award(db, award_id)
