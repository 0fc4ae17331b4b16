from fastapi import Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select
from typing import Any, List, Tuple

from contest_portal.schemas.common import PageParams


def page_params(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
) -> PageParams:
    """Shared page/limit query parameters"""
    return PageParams(page=page, limit=limit)


async def paginate(
    db: AsyncSession, query: Select, params: PageParams, *options
) -> Tuple[List[Any], int]:
    """Run `query` for one page and return (items, total); loader options apply to the page only"""
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    page_query = (
        query.options(*options)
        .offset(params.offset)
        .limit(params.limit)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(page_query)
    return list(result.scalars().unique().all()), total
