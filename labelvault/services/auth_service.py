"""Sign-in, session verification and password management."""

import logging
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.core.exceptions import AuthError, Forbidden, Unauthorized, ValidationError
from labelvault.middleware.auth import (
    generate_temporary_password,
    get_password_hash,
    verify_password,
)
from labelvault.models.user import User
from labelvault.services.captcha import CaptchaVerifier
from labelvault.services.mailer import Mailer
from labelvault.services.notifications import password_reset_email, send_best_effort
from labelvault.services.token_service import TokenService

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication flows backed by the users table."""

    def __init__(
        self,
        session: AsyncSession,
        token_service: TokenService,
        captcha: Optional[CaptchaVerifier] = None,
        mailer: Optional[Mailer] = None,
    ):
        self.session = session
        self.tokens = token_service
        self.captcha = captcha
        self.mailer = mailer

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def login(
        self,
        email: str,
        password: str,
        captcha_token: Optional[str],
        remote_ip: Optional[str] = None,
    ) -> Tuple[str, User]:
        """Check the captcha and credentials, then issue a session token."""
        if self.captcha is not None and not await self.captcha.verify(captcha_token, remote_ip):
            logger.warning(f"Captcha verification failed for login of {email}")
            raise ValidationError("Captcha verification failed", code="CAPTCHA_FAILED")

        user = await self.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"Invalid credentials for {email}")
            raise Unauthorized("Invalid credentials", code="INVALID_CREDENTIALS")

        if user.is_blocked:
            logger.warning(f"Blocked user {user.id} attempted to sign in")
            raise Forbidden(user.block_reason or "Account is blocked", code="ACCOUNT_BLOCKED")

        token = self.tokens.issue_for_user(user)
        logger.info(f"User {user.id} signed in")
        return token, user

    async def verify(self, token: Optional[str]) -> User:
        """Resolve a bearer token to its (still existing, unblocked) user."""
        if not token:
            raise Unauthorized("Missing token")
        claims = self.tokens.verify(token)
        user = await self.session.get(User, claims.get("sub"))
        if user is None:
            raise AuthError("Token subject no longer exists")
        if user.is_blocked:
            raise AuthError("Account is blocked")
        return user

    async def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        user = await self.session.get(User, user_id)
        if user is None or not verify_password(old_password, user.password_hash):
            raise ValidationError("Incorrect current password", code="INCORRECT_PASSWORD")

        user.password_hash = get_password_hash(new_password)
        await self.session.commit()
        logger.info(f"User {user_id} changed their password")

    async def reset_password(self, email: str) -> None:
        """Store and email a temporary password. Silent for unknown emails."""
        user = await self.get_user_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        temporary_password = generate_temporary_password(10)
        user.password_hash = get_password_hash(temporary_password)
        await self.session.commit()
        logger.info(f"Password reset for user {user.id}")

        if self.mailer is not None:
            await send_best_effort(
                self.mailer, user.email, password_reset_email(user.name, temporary_password)
            )
