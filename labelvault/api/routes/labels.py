"""Label API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.api.dependencies.common import (
    get_current_principal,
    get_email_sender,
    get_guard,
    get_hierarchy_resolver,
)
from labelvault.core.database import get_db_session
from labelvault.schemas.label import (
    LabelCreatedResponse,
    LabelCreateRequest,
    LabelResponse,
    LabelUpdateRequest,
)
from labelvault.schemas.user import UserResponse
from labelvault.services.access import AccessGuard, Principal
from labelvault.services.hierarchy import HierarchyResolver
from labelvault.services.label_service import LabelService
from labelvault.services.mailer import Mailer

router = APIRouter()


def get_label_service(
    session: AsyncSession = Depends(get_db_session),
    guard: AccessGuard = Depends(get_guard),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
    mailer: Mailer = Depends(get_email_sender),
) -> LabelService:
    return LabelService(session, guard, resolver, mailer)


@router.get("", response_model=List[LabelResponse])
async def list_labels(
    principal: Principal = Depends(get_current_principal),
    label_service: LabelService = Depends(get_label_service),
):
    """The caller's label and every label below it (all labels, for staff)."""
    return await label_service.list_labels(principal)


@router.post("", response_model=LabelCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_label(
    payload: LabelCreateRequest,
    principal: Principal = Depends(get_current_principal),
    label_service: LabelService = Depends(get_label_service),
):
    """Onboard a label together with its admin account."""
    label, admin, password = await label_service.create_label(
        principal,
        payload.label_fields(),
        admin_name=payload.admin_name,
        admin_email=payload.admin_email,
        admin_password=payload.admin_password,
        permissions=payload.permissions,
    )
    return LabelCreatedResponse(
        label=LabelResponse.model_validate(label),
        user=UserResponse.model_validate(admin),
        password=password,
    )


@router.get("/{label_id}", response_model=LabelResponse)
async def get_label(
    label_id: str,
    principal: Principal = Depends(get_current_principal),
    label_service: LabelService = Depends(get_label_service),
):
    return await label_service.get_label(principal, label_id)


@router.put("/{label_id}", response_model=LabelResponse)
async def update_label(
    label_id: str,
    payload: LabelUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    label_service: LabelService = Depends(get_label_service),
):
    return await label_service.update_label(principal, label_id, payload.changes())


@router.delete("/{label_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_label(
    label_id: str,
    principal: Principal = Depends(get_current_principal),
    label_service: LabelService = Depends(get_label_service),
):
    await label_service.delete_label(principal, label_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
