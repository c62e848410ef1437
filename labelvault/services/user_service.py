"""User management within the label hierarchy."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.core.exceptions import Forbidden, NotFound, ValidationError
from labelvault.middleware.auth import generate_temporary_password, get_password_hash
from labelvault.models.artist import Artist
from labelvault.models.label import Label
from labelvault.models.user import Permission, User, UserRole
from labelvault.services.access import AccessGuard, Action, Principal
from labelvault.services.mailer import Mailer
from labelvault.services.notifications import send_best_effort, welcome_email

logger = logging.getLogger(__name__)


def check_grantable(principal: Principal, permissions: Optional[Dict[str, bool]]) -> None:
    """Partners may hand out only the flags they hold themselves."""
    if not permissions or principal.is_staff:
        return
    for flag, granted in permissions.items():
        if granted and not principal.has_permission(Permission(flag)):
            raise Forbidden(f"Cannot grant permission {flag}")


def check_assignable_role(principal: Principal, role: str) -> None:
    if role == UserRole.OWNER.value and not principal.is_owner:
        raise Forbidden("Only the platform owner can assign the Owner role")
    if role in UserRole.staff_roles() and not principal.is_staff:
        raise Forbidden("Partners cannot create staff accounts")


class UserService:
    """CRUD for users, scoped by the caller's hierarchy."""

    def __init__(self, session: AsyncSession, guard: AccessGuard, mailer: Optional[Mailer] = None):
        self.session = session
        self.guard = guard
        self.mailer = mailer

    async def list_users(self, principal: Principal) -> List[User]:
        query = select(User).order_by(User.created_at.desc())
        if not principal.is_staff:
            query = query.where(
                or_(User.label_id.in_(principal.scope), User.id == principal.user_id)
            )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_user(self, principal: Principal, user_id: str) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        self.guard.require(principal, Action.READ, user)
        return user

    async def email_taken(self, email: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar() > 0

    async def create_user(self, principal: Principal, data: Dict[str, Any]) -> Tuple[User, str]:
        """
        Create a user and email the credentials.

        Returns the stored user and the plaintext password, which is shown to
        the caller once and never persisted.
        """
        role = UserRole(data["role"]).value
        check_assignable_role(principal, role)
        check_grantable(principal, data.get("permissions"))

        if role in UserRole.staff_roles():
            label_id = None
        else:
            label_id = data.get("label_id") or principal.label_id
            if not label_id:
                raise ValidationError("Partner users must belong to a label")

        user = User(
            name=data["name"],
            email=data["email"].lower(),
            role=role,
            designation=data.get("designation"),
            label_id=label_id,
            permissions=data.get("permissions") or {},
        )
        self.guard.require(principal, Action.CREATE, user)

        if label_id:
            label = await self.session.get(Label, label_id)
            if label is None:
                raise ValidationError(f"Label {label_id} does not exist")
            user.label_name = label.name

        artist_id = data.get("artist_id")
        if artist_id:
            artist = await self.session.get(Artist, artist_id)
            if artist is None or artist.label_id != label_id:
                raise ValidationError(f"Artist {artist_id} does not belong to label {label_id}")
            user.artist_id = artist.id
            user.artist_name = artist.name

        if await self.email_taken(user.email):
            raise ValidationError("A user with this email already exists", code="EMAIL_TAKEN")

        password = data.get("password") or generate_temporary_password(10)
        user.password_hash = get_password_hash(password)

        self.session.add(user)
        await self.session.commit()
        logger.info(f"User {user.id} ({role}) created by {principal.user_id}")

        if self.mailer is not None:
            await send_best_effort(self.mailer, user.email, welcome_email(user.name, user.email, password))

        return user, password

    async def update_user(self, principal: Principal, user_id: str, changes: Dict[str, Any]) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        self.guard.require(principal, Action.WRITE, user)

        if changes.get("role") is not None:
            changes["role"] = UserRole(changes["role"]).value
            if changes["role"] != user.role:
                check_assignable_role(principal, changes["role"])
                if (changes["role"] in UserRole.staff_roles()) != user.is_staff:
                    raise ValidationError("Cannot move a user between staff and partner roles")
        if "permissions" in changes:
            check_grantable(principal, changes["permissions"])
            changes["permissions"] = changes["permissions"] or {}
        if changes.get("is_blocked") and user.id == principal.user_id:
            raise ValidationError("You cannot block your own account")
        if changes.get("is_blocked") is False:
            changes["block_reason"] = None

        user.update_from_dict({k: v for k, v in changes.items() if v is not None or k == "block_reason"})
        await self.session.commit()
        logger.info(f"User {user.id} updated by {principal.user_id}: {sorted(changes)}")
        return user

    async def delete_user(self, principal: Principal, user_id: str) -> None:
        if user_id == principal.user_id:
            raise ValidationError("You cannot delete your own account")

        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        self.guard.require(principal, Action.DELETE, user)

        await self.session.execute(
            update(Label).where(Label.owner_id == user.id).values(owner_id=None)
        )
        await self.session.delete(user)
        await self.session.commit()
        logger.info(f"User {user_id} deleted by {principal.user_id}")
