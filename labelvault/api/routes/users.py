"""User API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.api.dependencies.common import get_current_principal, get_email_sender, get_guard
from labelvault.core.database import get_db_session
from labelvault.schemas.user import (
    UserCreatedResponse,
    UserCreateRequest,
    UserResponse,
    UserUpdateRequest,
)
from labelvault.services.access import AccessGuard, Principal
from labelvault.services.mailer import Mailer
from labelvault.services.user_service import UserService

router = APIRouter()


def get_user_service(
    session: AsyncSession = Depends(get_db_session),
    guard: AccessGuard = Depends(get_guard),
    mailer: Mailer = Depends(get_email_sender),
) -> UserService:
    return UserService(session, guard, mailer)


@router.get("", response_model=List[UserResponse])
async def list_users(
    principal: Principal = Depends(get_current_principal),
    user_service: UserService = Depends(get_user_service),
):
    """Users of the caller's hierarchy (everyone, for staff)."""
    return await user_service.list_users(principal)


@router.post("", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreateRequest,
    principal: Principal = Depends(get_current_principal),
    user_service: UserService = Depends(get_user_service),
):
    """Create a user. The password is returned once and emailed to the user."""
    user, password = await user_service.create_user(principal, payload.model_dump())
    return UserCreatedResponse(user=UserResponse.model_validate(user), password=password)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.get_user(principal, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    user_service: UserService = Depends(get_user_service),
):
    return await user_service.update_user(principal, user_id, payload.changes())


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.delete_user(principal, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
