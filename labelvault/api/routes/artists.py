"""Artist API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.api.dependencies.common import get_current_principal, get_guard
from labelvault.core.database import get_db_session
from labelvault.schemas.artist import ArtistCreateRequest, ArtistResponse, ArtistUpdateRequest
from labelvault.services.access import AccessGuard, Principal
from labelvault.services.artist_service import ArtistService

router = APIRouter()


def get_artist_service(
    session: AsyncSession = Depends(get_db_session),
    guard: AccessGuard = Depends(get_guard),
) -> ArtistService:
    return ArtistService(session, guard)


@router.get("", response_model=List[ArtistResponse])
async def list_artists(
    principal: Principal = Depends(get_current_principal),
    artist_service: ArtistService = Depends(get_artist_service),
):
    return await artist_service.list_artists(principal)


@router.post("", response_model=ArtistResponse, status_code=status.HTTP_201_CREATED)
async def create_artist(
    payload: ArtistCreateRequest,
    principal: Principal = Depends(get_current_principal),
    artist_service: ArtistService = Depends(get_artist_service),
):
    return await artist_service.create_artist(principal, payload.model_dump())


@router.get("/{artist_id}", response_model=ArtistResponse)
async def get_artist(
    artist_id: str,
    principal: Principal = Depends(get_current_principal),
    artist_service: ArtistService = Depends(get_artist_service),
):
    return await artist_service.get_artist(principal, artist_id)


@router.put("/{artist_id}", response_model=ArtistResponse)
async def update_artist(
    artist_id: str,
    payload: ArtistUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    artist_service: ArtistService = Depends(get_artist_service),
):
    return await artist_service.update_artist(principal, artist_id, payload.changes())


@router.delete("/{artist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_artist(
    artist_id: str,
    principal: Principal = Depends(get_current_principal),
    artist_service: ArtistService = Depends(get_artist_service),
):
    """Refused while a release outside Draft or Takedown credits the artist."""
    await artist_service.delete_artist(principal, artist_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
