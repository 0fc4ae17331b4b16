"""
Admin downloads: Excel exports and the materials archive.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import IO, Optional

from contest_portal.core.database import get_db
from contest_portal.core.logging_config import logger
from contest_portal.models.award import AwardLevel, AwardStatus
from contest_portal.models.registration import RegistrationStatus
from contest_portal.services import export_service

router = APIRouter()


def _download(content: IO[bytes], media_type: str, filename: str, row_count: int) -> StreamingResponse:
    return StreamingResponse(
        export_service.iter_file(content),
        media_type=media_type,
        headers={
            "Content-Disposition": export_service.content_disposition(filename),
            "X-Export-Count": str(row_count),
        },
    )


@router.get("/awards.xlsx")
async def export_awards(
    award_level: Optional[AwardLevel] = Query(None, alias="awardLevel"),
    status: Optional[AwardStatus] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    content, count = await export_service.export_awards(db, award_level, status)
    logger.info(f"Exported {count} award row(s)", extra={"event_type": "awards_export"})
    return _download(
        content, export_service.XLSX_MEDIA_TYPE, export_service.dated_filename("awards", "xlsx"), count
    )


@router.get("/registrations.xlsx")
async def export_registrations(
    competition_id: Optional[int] = Query(None, alias="competitionId"),
    status: Optional[RegistrationStatus] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    content, count = await export_service.export_registrations(db, competition_id, status)
    logger.info(f"Exported {count} registration row(s)", extra={"event_type": "registrations_export"})
    return _download(
        content,
        export_service.XLSX_MEDIA_TYPE,
        export_service.dated_filename("registrations", "xlsx"),
        count,
    )


@router.get("/competition/{competition_id}/materials.zip")
async def export_materials(competition_id: int, db: AsyncSession = Depends(get_db)):
    content, filename, count = await export_service.export_competition_materials(db, competition_id)
    return _download(content, export_service.ZIP_MEDIA_TYPE, filename, count)
