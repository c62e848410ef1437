"""Notice board API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.api.dependencies.common import get_current_principal, get_guard
from labelvault.core.database import get_db_session
from labelvault.schemas.notice import NoticeCreateRequest, NoticeResponse, NoticeUpdateRequest
from labelvault.services.access import AccessGuard, Principal
from labelvault.services.notice_service import NoticeService

router = APIRouter()


def get_notice_service(
    session: AsyncSession = Depends(get_db_session),
    guard: AccessGuard = Depends(get_guard),
) -> NoticeService:
    return NoticeService(session, guard)


@router.get("", response_model=List[NoticeResponse])
async def list_notices(
    principal: Principal = Depends(get_current_principal),
    notice_service: NoticeService = Depends(get_notice_service),
):
    """All notices, newest first."""
    return await notice_service.list_notices()


@router.post("", response_model=NoticeResponse, status_code=status.HTTP_201_CREATED)
async def create_notice(
    payload: NoticeCreateRequest,
    principal: Principal = Depends(get_current_principal),
    notice_service: NoticeService = Depends(get_notice_service),
):
    return await notice_service.create_notice(principal, payload.model_dump())


@router.put("/{notice_id}", response_model=NoticeResponse)
async def update_notice(
    notice_id: str,
    payload: NoticeUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    notice_service: NoticeService = Depends(get_notice_service),
):
    return await notice_service.update_notice(principal, notice_id, payload.changes())


@router.delete("/{notice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notice(
    notice_id: str,
    principal: Principal = Depends(get_current_principal),
    notice_service: NoticeService = Depends(get_notice_service),
):
    await notice_service.delete_notice(principal, notice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
