from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from contest_portal.core.database import get_db
from contest_portal.models.registration import RegistrationStatus
from contest_portal.models.user import User
from contest_portal.modules.auth.dependencies import get_current_user
from contest_portal.schemas.common import ApiResponse, PageParams, Pagination
from contest_portal.schemas.registration import (
    RegistrationCreate,
    RegistrationListData,
    RegistrationResponse,
)
from contest_portal.services import registration_service
from contest_portal.utils.pagination import page_params

router = APIRouter()


@router.post("", response_model=ApiResponse[RegistrationResponse], status_code=status.HTTP_201_CREATED)
async def create_registration(
    payload: RegistrationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Register for a competition; the registration starts pending"""
    registration = await registration_service.create_registration(db, current_user, payload)
    return ApiResponse[RegistrationResponse](
        data=RegistrationResponse.model_validate(registration), message="Registration submitted"
    )


@router.get("/my", response_model=ApiResponse[RegistrationListData])
async def my_registrations(
    params: PageParams = Depends(page_params),
    status: Optional[RegistrationStatus] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    registrations, total = await registration_service.list_user_registrations(
        db, current_user, params, status
    )
    return ApiResponse[RegistrationListData](data=RegistrationListData(
        registrations=[RegistrationResponse.model_validate(r) for r in registrations],
        pagination=Pagination.build(params.page, params.limit, total),
    ))


@router.get("/{registration_id}", response_model=ApiResponse[RegistrationResponse])
async def get_registration(
    registration_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    registration = await registration_service.get_registration_for(db, registration_id, current_user)
    return ApiResponse[RegistrationResponse](data=RegistrationResponse.model_validate(registration))


@router.delete("/{registration_id}", response_model=ApiResponse[RegistrationResponse])
async def cancel_registration(
    registration_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    registration = await registration_service.cancel_registration(db, registration_id, current_user)
    return ApiResponse[RegistrationResponse](
        data=RegistrationResponse.model_validate(registration), message="Registration cancelled"
    )


@router.post("/{registration_id}/materials", response_model=ApiResponse[RegistrationResponse])
async def upload_materials(
    registration_id: int,
    files: List[UploadFile] = File(..., description="Documents, archives or images"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Attach material files to an existing registration"""
    registration = await registration_service.add_materials(db, registration_id, current_user, files)
    return ApiResponse[RegistrationResponse](
        data=RegistrationResponse.model_validate(registration), message="Materials uploaded"
    )
