"""Common FastAPI dependencies."""

import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.core.database import get_db_session
from labelvault.core.exceptions import Forbidden, Unauthorized
from labelvault.models.user import User
from labelvault.services.access import AccessGuard, Principal, get_access_guard
from labelvault.services.captcha import CaptchaVerifier, get_captcha_verifier
from labelvault.services.hierarchy import HierarchyResolver
from labelvault.services.mailer import Mailer, get_mailer
from labelvault.services.release_lifecycle import ReleaseLifecycle
from labelvault.services.storage import AssetStore, get_asset_store

logger = logging.getLogger(__name__)


def get_hierarchy_resolver(session: AsyncSession = Depends(get_db_session)) -> HierarchyResolver:
    """One resolver, and so one scope memo, per request."""
    return HierarchyResolver(session)


def get_current_user_id(request: Request) -> str:
    """Get current user ID from request."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise Unauthorized()
    return user_id


async def get_current_principal(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    resolver: HierarchyResolver = Depends(get_hierarchy_resolver),
) -> Principal:
    """
    Build the caller's principal from the stored user row.

    Role and permission changes therefore apply to tokens issued before
    them; a deleted user's token stops working.
    """
    user = await session.get(User, user_id)
    if user is None:
        logger.warning(f"Token subject {user_id} no longer exists")
        raise Unauthorized(code="USER_NOT_FOUND")
    if user.is_blocked:
        raise Forbidden(user.block_reason or "Account is blocked", code="ACCOUNT_BLOCKED")

    scope = frozenset()
    if not user.is_staff:
        scope = await resolver.descendant_scope(user.label_id)
    return Principal.from_user(user, scope)


def get_guard() -> AccessGuard:
    return get_access_guard()


def get_storage() -> AssetStore:
    return get_asset_store()


def get_email_sender() -> Mailer:
    return get_mailer()


def get_captcha() -> CaptchaVerifier:
    return get_captcha_verifier()


def get_release_lifecycle(
    session: AsyncSession = Depends(get_db_session),
    asset_store: AssetStore = Depends(get_storage),
    mailer: Mailer = Depends(get_email_sender),
) -> ReleaseLifecycle:
    return ReleaseLifecycle(session, asset_store, mailer)
