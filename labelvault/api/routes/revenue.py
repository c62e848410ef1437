"""Revenue API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.api.dependencies.common import get_current_principal, get_guard
from labelvault.core.database import get_db_session
from labelvault.schemas.revenue import RevenueSummaryResponse
from labelvault.services.access import AccessGuard, Principal
from labelvault.services.revenue_service import RevenueService

router = APIRouter()


def get_revenue_service(
    session: AsyncSession = Depends(get_db_session),
    guard: AccessGuard = Depends(get_guard),
) -> RevenueService:
    return RevenueService(session, guard)


@router.get("", response_model=RevenueSummaryResponse)
async def list_revenue(
    label_id: Optional[str] = Query(None, alias="labelId"),
    report_month: Optional[str] = Query(None, alias="reportMonth", description="YYYY-MM"),
    principal: Principal = Depends(get_current_principal),
    revenue_service: RevenueService = Depends(get_revenue_service),
):
    """Revenue rows of the caller's hierarchy with paid and pending totals."""
    entries = await revenue_service.list_entries(principal, label_id=label_id, report_month=report_month)
    return revenue_service.summarize(entries)
