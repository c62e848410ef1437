"""Search API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.api.dependencies.common import get_current_principal
from labelvault.core.database import get_db_session
from labelvault.schemas.search import SearchResponse
from labelvault.services.access import Principal
from labelvault.services.search_service import SearchService

router = APIRouter()


def get_search_service(session: AsyncSession = Depends(get_db_session)) -> SearchService:
    return SearchService(session)


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query("", description="Substring to look for"),
    principal: Principal = Depends(get_current_principal),
    search_service: SearchService = Depends(get_search_service),
):
    """Match users, releases, artists and labels by name or title."""
    return await search_service.search(q)
