from datetime import datetime
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from contest_portal.core.database import get_db
from contest_portal.models.award import AwardLevel, AwardStatus
from contest_portal.models.user import User
from contest_portal.modules.auth.dependencies import get_current_admin
from contest_portal.schemas.admin import ReviewRequest
from contest_portal.schemas.award import AwardListData, AwardResponse
from contest_portal.schemas.common import ApiResponse, PageParams, Pagination
from contest_portal.services import award_service, review_service
from contest_portal.utils.pagination import page_params

router = APIRouter()


@router.post("/certificate", response_model=ApiResponse[AwardResponse], status_code=status.HTTP_201_CREATED)
async def issue_college_certificate(
    user_id: int = Form(..., alias="userId"),
    award_name: str = Form(..., alias="awardName"),
    award_time: datetime = Form(..., alias="awardTime"),
    competition_id: Optional[int] = Form(None, alias="competitionId"),
    award_rank: Optional[str] = Form(None, alias="awardRank"),
    description: Optional[str] = Form(None),
    certificate_image: Optional[str] = Form(None, alias="certificateImage"),
    certificate: Optional[UploadFile] = File(None, description="pdf, jpeg, png or webp"),
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Issue an approved college-level award and notify the recipient"""
    award = await award_service.issue_college_certificate(
        db,
        current_user,
        user_id=user_id,
        award_name=award_name,
        award_time=award_time,
        competition_id=competition_id,
        award_rank=award_rank,
        description=description,
        certificate_image=certificate_image,
        certificate=certificate,
    )
    return ApiResponse[AwardResponse](data=AwardResponse.model_validate(award), message="Certificate issued")


@router.get("", response_model=ApiResponse[AwardListData])
async def list_awards(
    params: PageParams = Depends(page_params),
    award_level: Optional[AwardLevel] = Query(None, alias="awardLevel"),
    status: Optional[AwardStatus] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    awards, total = await award_service.list_all_awards(db, params, award_level, status)
    return ApiResponse[AwardListData](data=AwardListData(
        awards=[AwardResponse.model_validate(a) for a in awards],
        pagination=Pagination.build(params.page, params.limit, total),
    ))


@router.put("/{award_id}/review", response_model=ApiResponse[AwardResponse])
async def review_award(
    award_id: int,
    payload: ReviewRequest,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    award = await review_service.review_award(db, award_id, payload.status, current_user, payload.review_notes)
    return ApiResponse[AwardResponse](data=AwardResponse.model_validate(award), message="Review completed")
