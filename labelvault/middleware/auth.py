"""Authentication middleware and password helpers."""

import logging
import secrets
import string

from fastapi import Request, status
from fastapi.responses import JSONResponse
from passlib.context import CryptContext
from starlette.middleware.base import BaseHTTPMiddleware

from labelvault.core.exceptions import AuthError
from labelvault.services.token_service import get_token_service

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

TEMPORARY_PASSWORD_ALPHABET = string.ascii_uppercase + string.digits


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Verifies the bearer token on every request except the public paths.

    On success the verified claims are stored on ``request.state`` for the
    principal dependency. Paths are matched after the API prefix has been
    stripped.
    """

    EXEMPT_PATHS = {
        "/",
        "/health",
        "/version",
        "/auth/login",
        "/auth/verify",
        "/auth/reset-password",
        "/openapi.json",
        "/docs",
        "/redoc",
        "/favicon.ico",
    }

    async def dispatch(self, request: Request, call_next):
        """Process request and validate authentication."""
        path = request.url.path.rstrip("/") or "/"
        if request.method == "OPTIONS" or path in self.EXEMPT_PATHS:
            return await call_next(request)

        authorization = request.headers.get("Authorization")
        if not authorization or not authorization.startswith("Bearer "):
            logger.warning(f"Missing bearer token for {request.method} {path}")
            return self._unauthorized("Unauthorized", "AUTHORIZATION_REQUIRED")

        token = authorization[len("Bearer "):].strip()
        try:
            claims = get_token_service().verify(token)
        except AuthError as e:
            logger.warning(f"Token rejected for {request.method} {path}: {e.message}")
            return self._unauthorized("Unauthorized", e.code)

        if not claims.get("sub"):
            return self._unauthorized("Unauthorized", "INVALID_TOKEN_PAYLOAD")

        request.state.claims = claims
        request.state.user_id = claims["sub"]
        logger.debug(f"Authenticated user {claims['sub']} for {path}")

        return await call_next(request)

    @staticmethod
    def _unauthorized(message: str, code: str) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": message, "code": code},
            headers={"WWW-Authenticate": "Bearer"},
        )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash has an unrecognised format")
        return False


def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)


def generate_temporary_password(length: int = 10) -> str:
    """Random uppercase alphanumeric password for new or reset accounts."""
    return "".join(secrets.choice(TEMPORARY_PASSWORD_ALPHABET) for _ in range(length))
