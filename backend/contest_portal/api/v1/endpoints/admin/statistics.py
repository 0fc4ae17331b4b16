from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contest_portal.core.database import get_db
from contest_portal.schemas.admin import StatisticsResponse
from contest_portal.schemas.common import ApiResponse
from contest_portal.services.statistics_service import get_statistics

router = APIRouter()


@router.get("", response_model=ApiResponse[StatisticsResponse])
async def statistics(db: AsyncSession = Depends(get_db)):
    """Totals plus awards by level and registrations by status"""
    stats = await get_statistics(db)
    return ApiResponse[StatisticsResponse](data=StatisticsResponse(**stats))
