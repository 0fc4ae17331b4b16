from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from contest_portal.core.database import get_db
from contest_portal.models.registration import RegistrationStatus
from contest_portal.models.user import User
from contest_portal.modules.auth.dependencies import get_current_admin
from contest_portal.schemas.admin import ReviewRequest
from contest_portal.schemas.common import ApiResponse, PageParams, Pagination
from contest_portal.schemas.registration import RegistrationListData, RegistrationResponse
from contest_portal.services import registration_service, review_service
from contest_portal.utils.pagination import page_params

router = APIRouter()


@router.get("/competition/{competition_id}", response_model=ApiResponse[RegistrationListData])
async def competition_registrations(
    competition_id: int,
    params: PageParams = Depends(page_params),
    status: Optional[RegistrationStatus] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    registrations, total = await registration_service.list_competition_registrations(
        db, competition_id, params, status
    )
    return ApiResponse[RegistrationListData](data=RegistrationListData(
        registrations=[RegistrationResponse.model_validate(r) for r in registrations],
        pagination=Pagination.build(params.page, params.limit, total),
    ))


@router.put("/{registration_id}/review", response_model=ApiResponse[RegistrationResponse])
async def review_registration(
    registration_id: int,
    payload: ReviewRequest,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    registration = await review_service.review_registration(
        db, registration_id, payload.status, current_user, payload.review_notes
    )
    return ApiResponse[RegistrationResponse](
        data=RegistrationResponse.model_validate(registration), message="Review completed"
    )
