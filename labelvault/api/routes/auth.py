"""Authentication API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.api.dependencies.common import (
    get_captcha,
    get_current_user_id,
    get_email_sender,
)
from labelvault.core.database import get_db_session
from labelvault.core.exceptions import Unauthorized
from labelvault.schemas.base import SuccessResponse
from labelvault.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    UserResponse,
    VerifyResponse,
)
from labelvault.services.auth_service import AuthService
from labelvault.services.captcha import CaptchaVerifier
from labelvault.services.mailer import Mailer
from labelvault.services.token_service import get_token_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_auth_service(
    session: AsyncSession = Depends(get_db_session),
    captcha: CaptchaVerifier = Depends(get_captcha),
    mailer: Mailer = Depends(get_email_sender),
) -> AuthService:
    return AuthService(session, get_token_service(), captcha, mailer)


def _client_ip(request: Request) -> Optional[str]:
    return request.headers.get("cf-connecting-ip") or (request.client.host if request.client else None)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange email, password and captcha token for a bearer token."""
    token, user = await auth_service.login(
        payload.email, payload.password, payload.captcha_token, _client_ip(request)
    )
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/verify", response_model=VerifyResponse)
async def verify(
    authorization: Optional[str] = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Probe whether a bearer token still maps to an active user."""
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):].strip()

    try:
        user = await auth_service.verify(token)
    except Unauthorized as e:
        logger.info(f"Token verification failed: {e.message}")
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"valid": False})

    return VerifyResponse(valid=True, user=UserResponse.model_validate(user))


@router.post("/change-password", response_model=SuccessResponse)
async def change_password(
    payload: ChangePasswordRequest,
    user_id: str = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.change_password(user_id, payload.old_pass, payload.new_pass)
    return SuccessResponse()


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Always succeeds so the response does not reveal which emails exist."""
    await auth_service.reset_password(payload.email)
    return SuccessResponse()
