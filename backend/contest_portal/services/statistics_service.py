from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contest_portal.models.award import Award, AwardLevel
from contest_portal.models.competition import Competition
from contest_portal.models.registration import Registration, RegistrationStatus
from contest_portal.models.user import User


async def _count(db: AsyncSession, column) -> int:
    return (await db.execute(select(func.count(column)))).scalar() or 0


async def _grouped(db: AsyncSession, column, id_column, members) -> Dict[str, int]:
    """Counts per enum member, zero-filled"""
    counts = {member.value: 0 for member in members}
    result = await db.execute(select(column, func.count(id_column)).group_by(column))
    for key, count in result.all():
        counts[key.value if hasattr(key, "value") else str(key)] = count
    return counts


async def get_statistics(db: AsyncSession) -> Dict[str, Any]:
    return {
        "total_users": await _count(db, User.id),
        "total_competitions": await _count(db, Competition.id),
        "total_registrations": await _count(db, Registration.id),
        "total_awards": await _count(db, Award.id),
        "awards_by_level": await _grouped(db, Award.award_level, Award.id, AwardLevel),
        "registrations_by_status": await _grouped(
            db, Registration.status, Registration.id, RegistrationStatus
        ),
    }
