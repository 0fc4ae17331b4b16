from datetime import datetime
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from contest_portal.core.database import get_db
from contest_portal.models.award import AwardLevel, AwardStatus
from contest_portal.models.user import User
from contest_portal.modules.auth.dependencies import get_current_user
from contest_portal.schemas.award import AwardListData, AwardResponse, AwardUpdate
from contest_portal.schemas.common import ApiResponse, PageParams, Pagination
from contest_portal.services import award_service
from contest_portal.utils.pagination import page_params

router = APIRouter()


@router.post("", response_model=ApiResponse[AwardResponse], status_code=status.HTTP_201_CREATED)
async def create_award(
    award_level: AwardLevel = Form(..., alias="awardLevel"),
    award_name: str = Form(..., alias="awardName"),
    award_time: datetime = Form(..., alias="awardTime"),
    competition_id: Optional[int] = Form(None, alias="competitionId"),
    award_rank: Optional[str] = Form(None, alias="awardRank"),
    description: Optional[str] = Form(None),
    certificate_image: Optional[str] = Form(None, alias="certificateImage"),
    certificate: Optional[UploadFile] = File(None, description="jpeg, png or webp"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Submit a school, provincial or national award for review.

    The certificate is either an uploaded image or a URL in
    `certificateImage`; a non-empty URL takes precedence.
    """
    award = await award_service.create_award(
        db,
        current_user,
        award_level=award_level,
        award_name=award_name,
        award_time=award_time,
        competition_id=competition_id,
        award_rank=award_rank,
        description=description,
        certificate_image=certificate_image,
        certificate=certificate,
    )
    return ApiResponse[AwardResponse](
        data=AwardResponse.model_validate(award), message="Award submitted, waiting for review"
    )


@router.get("/my", response_model=ApiResponse[AwardListData])
async def my_awards(
    params: PageParams = Depends(page_params),
    award_level: Optional[AwardLevel] = Query(None, alias="awardLevel"),
    status: Optional[AwardStatus] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    awards, total = await award_service.list_user_awards(db, current_user, params, award_level, status)
    return ApiResponse[AwardListData](data=AwardListData(
        awards=[AwardResponse.model_validate(a) for a in awards],
        pagination=Pagination.build(params.page, params.limit, total),
    ))


@router.get("/{award_id}", response_model=ApiResponse[AwardResponse])
async def get_award(
    award_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    award = await award_service.get_award_for(db, award_id, current_user)
    return ApiResponse[AwardResponse](data=AwardResponse.model_validate(award))


@router.put("/{award_id}", response_model=ApiResponse[AwardResponse])
async def update_award(
    award_id: int,
    payload: AwardUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Edit a pending award"""
    award = await award_service.update_award(db, award_id, current_user, payload)
    return ApiResponse[AwardResponse](data=AwardResponse.model_validate(award), message="Award updated")


@router.delete("/{award_id}", response_model=ApiResponse[None])
async def delete_award(
    award_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await award_service.delete_award(db, award_id, current_user)
    return ApiResponse[None](message="Award deleted")
