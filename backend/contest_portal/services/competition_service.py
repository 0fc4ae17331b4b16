"""
Competition catalog queries and administrator CRUD.
"""

from typing import Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from contest_portal.core.exceptions import CompetitionNotFoundError, ValidationError
from contest_portal.models.competition import Competition, CompetitionStatus
from contest_portal.models.registration import Registration, RegistrationStatus
from contest_portal.models.user import User
from contest_portal.schemas.common import PageParams
from contest_portal.schemas.competition import (
    CompetitionCreate,
    CompetitionSortField,
    CompetitionUpdate,
    SortOrder,
)
from contest_portal.utils.pagination import paginate


SORT_COLUMNS = {
    CompetitionSortField.CREATED_AT: Competition.created_at,
    CompetitionSortField.UPDATED_AT: Competition.updated_at,
    CompetitionSortField.TITLE: Competition.title,
    CompetitionSortField.TYPE: Competition.type,
    CompetitionSortField.STATUS: Competition.status,
    CompetitionSortField.REGISTRATION_START: Competition.registration_start,
    CompetitionSortField.REGISTRATION_END: Competition.registration_end,
    CompetitionSortField.START_TIME: Competition.start_time,
    CompetitionSortField.END_TIME: Competition.end_time,
    CompetitionSortField.MAX_PARTICIPANTS: Competition.max_participants,
    CompetitionSortField.CURRENT_PARTICIPANTS: Competition.current_participants,
}


async def list_competitions(
    db: AsyncSession,
    params: PageParams,
    search: Optional[str] = None,
    type: Optional[str] = None,
    status: Optional[CompetitionStatus] = None,
    sort_by: CompetitionSortField = CompetitionSortField.CREATED_AT,
    sort_order: SortOrder = SortOrder.DESC,
) -> Tuple[list, int]:
    query = select(Competition)

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Competition.title.ilike(pattern), Competition.description.ilike(pattern)))
    if type:
        query = query.where(Competition.type == type)
    if status:
        query = query.where(Competition.status == status)

    column = SORT_COLUMNS[sort_by]
    ordering = column.asc() if sort_order == SortOrder.ASC else column.desc()
    query = query.order_by(ordering, Competition.id.desc())

    return await paginate(db, query, params, selectinload(Competition.creator))


async def get_competition(db: AsyncSession, competition_id: int, lock: bool = False) -> Competition:
    query = select(Competition).where(Competition.id == competition_id)
    if lock:
        query = query.with_for_update()
    else:
        query = query.options(selectinload(Competition.creator))
    query = query.execution_options(populate_existing=True)

    result = await db.execute(query)
    competition = result.scalar_one_or_none()
    if not competition:
        raise CompetitionNotFoundError(competition_id)
    return competition


async def count_registrations(
    db: AsyncSession,
    competition_id: int,
    status: Optional[RegistrationStatus] = None,
    exclude_id: Optional[int] = None,
) -> int:
    query = select(func.count(Registration.id)).where(Registration.competition_id == competition_id)
    if status is not None:
        query = query.where(Registration.status == status)
    if exclude_id is not None:
        query = query.where(Registration.id != exclude_id)
    return (await db.execute(query)).scalar() or 0


async def get_competition_detail(db: AsyncSession, competition_id: int) -> dict:
    """Competition plus its total and approved registration counts"""
    competition = await get_competition(db, competition_id)
    return {
        "competition": competition,
        "registration_count": await count_registrations(db, competition_id),
        "approved_count": await count_registrations(db, competition_id, RegistrationStatus.APPROVED),
    }


async def create_competition(db: AsyncSession, data: CompetitionCreate, creator: User) -> Competition:
    competition = Competition(**data.model_dump(), created_by=creator.id, current_participants=0)
    db.add(competition)
    await db.commit()
    return await get_competition(db, competition.id)


async def update_competition(db: AsyncSession, competition_id: int, data: CompetitionUpdate) -> Competition:
    competition = await get_competition(db, competition_id)
    changes = data.model_dump(exclude_unset=True)

    for field in ("title", "type", "registration_start", "registration_end",
                  "start_time", "end_time", "max_participants", "status"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null", field=field)

    def effective(field):
        return changes[field] if field in changes else getattr(competition, field)

    if effective("registration_start") > effective("registration_end"):
        raise ValidationError("registrationStart must not be after registrationEnd")
    if effective("start_time") > effective("end_time"):
        raise ValidationError("startTime must not be after endTime")

    for field, value in changes.items():
        setattr(competition, field, value)

    await db.commit()
    return await get_competition(db, competition_id)


async def delete_competition(db: AsyncSession, competition_id: int) -> None:
    """Delete a competition together with its registrations"""
    competition = await get_competition(db, competition_id)
    await db.delete(competition)
    await db.commit()
