from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from contest_portal.core.database import get_db
from contest_portal.models.competition import CompetitionStatus
from contest_portal.models.user import User
from contest_portal.modules.auth.dependencies import get_current_admin
from contest_portal.schemas.common import ApiResponse, PageParams, Pagination
from contest_portal.schemas.competition import (
    CompetitionCreate,
    CompetitionDetail,
    CompetitionListData,
    CompetitionResponse,
    CompetitionSortField,
    CompetitionUpdate,
    SortOrder,
)
from contest_portal.services import competition_service
from contest_portal.utils.pagination import page_params

router = APIRouter()


@router.get("", response_model=ApiResponse[CompetitionListData])
async def list_competitions(
    params: PageParams = Depends(page_params),
    search: Optional[str] = Query(None, description="Match title or description"),
    type: Optional[str] = Query(None),
    status: Optional[CompetitionStatus] = Query(None),
    sort_by: CompetitionSortField = Query(CompetitionSortField.CREATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    db: AsyncSession = Depends(get_db)
):
    """List competitions (public)"""
    competitions, total = await competition_service.list_competitions(
        db, params, search=search, type=type, status=status, sort_by=sort_by, sort_order=sort_order
    )
    return ApiResponse[CompetitionListData](data=CompetitionListData(
        competitions=[CompetitionResponse.model_validate(c) for c in competitions],
        pagination=Pagination.build(params.page, params.limit, total),
    ))


@router.get("/{competition_id}", response_model=ApiResponse[CompetitionDetail])
async def get_competition(competition_id: int, db: AsyncSession = Depends(get_db)):
    """Competition detail with registration counts (public)"""
    detail = await competition_service.get_competition_detail(db, competition_id)
    data = CompetitionDetail.model_validate(detail["competition"]).model_copy(update={
        "registration_count": detail["registration_count"],
        "approved_count": detail["approved_count"],
    })
    return ApiResponse[CompetitionDetail](data=data)


@router.post("", response_model=ApiResponse[CompetitionResponse], status_code=status.HTTP_201_CREATED)
async def create_competition(
    payload: CompetitionCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    competition = await competition_service.create_competition(db, payload, current_user)
    return ApiResponse[CompetitionResponse](
        data=CompetitionResponse.model_validate(competition), message="Competition created"
    )


@router.put("/{competition_id}", response_model=ApiResponse[CompetitionResponse])
async def update_competition(
    competition_id: int,
    payload: CompetitionUpdate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    competition = await competition_service.update_competition(db, competition_id, payload)
    return ApiResponse[CompetitionResponse](
        data=CompetitionResponse.model_validate(competition), message="Competition updated"
    )


@router.delete("/{competition_id}", response_model=ApiResponse[None])
async def delete_competition(
    competition_id: int,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await competition_service.delete_competition(db, competition_id)
    return ApiResponse[None](message="Competition deleted")
