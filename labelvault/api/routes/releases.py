"""Release API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.api.dependencies.common import (
    get_current_principal,
    get_guard,
    get_hierarchy_resolver,
    get_release_lifecycle,
    get_storage,
)
from labelvault.core.database import get_db_session
from labelvault.schemas.release import (
    AssetUploadResponse,
    ReleaseCreateRequest,
    ReleaseResponse,
    ReleaseSummaryResponse,
    ReleaseUpdateRequest,
)
from labelvault.services.access import AccessGuard, Principal
from labelvault.services.hierarchy import HierarchyResolver
from labelvault.services.release_lifecycle import ReleaseLifecycle
from labelvault.services.release_service import ReleaseService
from labelvault.services.storage import AssetStore

router = APIRouter()


def get_release_service(
    session: AsyncSession = Depends(get_db_session),
    guard: AccessGuard = Depends(get_guard),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
    lifecycle: ReleaseLifecycle = Depends(get_release_lifecycle),
    asset_store: AssetStore = Depends(get_storage),
) -> ReleaseService:
    return ReleaseService(session, guard, resolver, lifecycle, asset_store)


@router.get("", response_model=List[ReleaseSummaryResponse])
async def list_releases(
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    label_id: Optional[str] = Query(None, alias="labelId", description="Filter by label"),
    principal: Principal = Depends(get_current_principal),
    release_service: ReleaseService = Depends(get_release_service),
):
    """Release summaries within the caller's hierarchy."""
    return await release_service.list_releases(principal, status=status_filter, label_id=label_id)


@router.post("", response_model=ReleaseResponse, status_code=status.HTTP_201_CREATED)
async def create_release(
    payload: ReleaseCreateRequest,
    principal: Principal = Depends(get_current_principal),
    release_service: ReleaseService = Depends(get_release_service),
):
    """Create a Draft release. Any status in the body is ignored."""
    return await release_service.create_release(
        principal,
        payload.release_fields(),
        label_id=payload.label_id,
        tracks=[track.model_dump() for track in payload.tracks],
        note=payload.note,
    )


@router.get("/{release_id}", response_model=ReleaseResponse)
async def get_release(
    release_id: str,
    principal: Principal = Depends(get_current_principal),
    release_service: ReleaseService = Depends(get_release_service),
):
    """Release with its tracks in order and its notes newest first."""
    return await release_service.get_release(principal, release_id)


@router.put("/{release_id}", response_model=ReleaseResponse)
async def update_release(
    release_id: str,
    payload: ReleaseUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    release_service: ReleaseService = Depends(get_release_service),
):
    """
    Edit metadata, replace tracks, append a note and/or change status.

    All parts are applied together or not at all.
    """
    outcome = await release_service.update_release(
        principal,
        release_id,
        payload.release_changes(),
        tracks=payload.track_payloads(),
        note=payload.note,
        status=payload.status.value if payload.status else None,
    )
    return outcome.release


@router.delete("/{release_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_release(
    release_id: str,
    principal: Principal = Depends(get_current_principal),
    release_service: ReleaseService = Depends(get_release_service),
):
    await release_service.delete_release(principal, release_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{release_id}/uploads", response_model=AssetUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_asset(
    release_id: str,
    request: Request,
    kind: str = Query(..., description="artwork or audio"),
    file_name: str = Query(..., alias="fileName"),
    track_ref: Optional[str] = Query(None, alias="trackRef", description="Sub-folder for audio masters"),
    principal: Principal = Depends(get_current_principal),
    release_service: ReleaseService = Depends(get_release_service),
):
    """Store the raw request body as release artwork or an audio master."""
    data = await request.body()
    url, key = await release_service.upload_asset(
        principal,
        release_id,
        kind,
        file_name,
        data,
        content_type=request.headers.get("content-type"),
        track_ref=track_ref,
    )
    return AssetUploadResponse(url=url, key=key)
