"""Label onboarding and hierarchy maintenance."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.core.exceptions import Forbidden, NotFound, ReferentialIntegrityError, ValidationError
from labelvault.middleware.auth import generate_temporary_password, get_password_hash
from labelvault.models.base import generate_uuid
from labelvault.models.label import Label
from labelvault.models.release import Release, ReleaseStatus
from labelvault.models.user import LABEL_ADMIN_PERMISSIONS, User, UserRole
from labelvault.services.access import AccessGuard, Action, Principal
from labelvault.services.hierarchy import HierarchyResolver
from labelvault.services.mailer import Mailer
from labelvault.services.notifications import label_registration_email, send_best_effort
from labelvault.services.user_service import check_grantable

logger = logging.getLogger(__name__)


class LabelService:
    """
    Labels and their administrator accounts.

    Creating a label always creates its admin user in the same transaction.
    Reparenting keeps the tree acyclic by refusing a parent that lies inside
    the label's own descendant scope.
    """

    def __init__(
        self,
        session: AsyncSession,
        guard: AccessGuard,
        resolver: HierarchyResolver,
        mailer: Optional[Mailer] = None,
    ):
        self.session = session
        self.guard = guard
        self.resolver = resolver
        self.mailer = mailer

    async def list_labels(self, principal: Principal) -> List[Label]:
        query = select(Label).order_by(Label.name)
        if not principal.is_staff:
            query = query.where(Label.id.in_(principal.scope))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_label(self, principal: Principal, label_id: str) -> Label:
        label = await self.session.get(Label, label_id)
        if label is None:
            raise NotFound(f"Label {label_id} not found")
        self.guard.require(principal, Action.READ, label)
        return label

    async def create_label(
        self,
        principal: Principal,
        fields: Dict[str, Any],
        admin_name: str,
        admin_email: str,
        admin_password: Optional[str] = None,
        permissions: Optional[Dict[str, bool]] = None,
    ) -> Tuple[Label, User, str]:
        """
        Create a label under an existing parent (or as a root, for staff)
        together with its admin user.

        Returns:
            The label, the admin user and the admin's plaintext password.
        """
        parent_label_id = fields.get("parent_label_id")
        if not parent_label_id and not principal.is_staff:
            parent_label_id = principal.label_id

        label = Label(id=generate_uuid(), **{**fields, "parent_label_id": parent_label_id})
        self.guard.require(principal, Action.CREATE, label)

        if parent_label_id and await self.session.get(Label, parent_label_id) is None:
            raise ValidationError(f"Parent label {parent_label_id} does not exist")

        check_grantable(principal, permissions)
        email = admin_email.lower()
        taken = await self.session.execute(
            select(func.count()).select_from(User).where(func.lower(User.email) == email)
        )
        if taken.scalar() > 0:
            raise ValidationError("A user with this email already exists", code="EMAIL_TAKEN")

        password = admin_password or generate_temporary_password(10)
        admin = User(
            id=generate_uuid(),
            name=admin_name,
            email=email,
            password_hash=get_password_hash(password),
            role=(UserRole.SUB_LABEL_ADMIN if parent_label_id else UserRole.LABEL_ADMIN).value,
            label_id=label.id,
            label_name=label.name,
            permissions=dict(permissions) if permissions else dict(LABEL_ADMIN_PERMISSIONS),
        )
        label.owner_id = admin.id

        self.session.add_all([label, admin])
        await self.session.commit()
        self.resolver.invalidate()
        logger.info(
            f"Label {label.id} created under {parent_label_id or 'root'} by {principal.user_id}"
        )

        if self.mailer is not None:
            await send_best_effort(
                self.mailer,
                admin.email,
                label_registration_email(admin.name, label.name, admin.email, password),
            )

        return label, admin, password

    async def update_label(self, principal: Principal, label_id: str, changes: Dict[str, Any]) -> Label:
        label = await self.session.get(Label, label_id)
        if label is None:
            raise NotFound(f"Label {label_id} not found")
        self.guard.require(principal, Action.WRITE, label)

        reparented = False
        if "parent_label_id" in changes and changes["parent_label_id"] != label.parent_label_id:
            await self._check_reparent(principal, label, changes["parent_label_id"])
            reparented = True

        if "status" in changes and changes["status"] != label.status:
            if not principal.is_staff:
                raise Forbidden("Only staff can change a label's status")
            if changes["status"] is None:
                del changes["status"]

        if changes.get("owner_id"):
            owner = await self.session.get(User, changes["owner_id"])
            if owner is None or owner.label_id != label.id:
                raise ValidationError("The label owner must be a user of that label")

        if changes.get("name") is None:
            changes.pop("name", None)

        label.update_from_dict(changes)
        if "name" in changes:
            await self.session.execute(
                update(User).where(User.label_id == label.id).values(label_name=label.name)
            )

        await self.session.commit()
        if reparented:
            self.resolver.invalidate()
        logger.info(f"Label {label.id} updated by {principal.user_id}: {sorted(changes)}")
        return label

    async def _check_reparent(self, principal: Principal, label: Label, new_parent_id: Optional[str]) -> None:
        if principal.is_own_label(label.id) and not principal.is_staff:
            raise Forbidden("Cannot move your own label")
        if new_parent_id is None:
            if not principal.is_staff:
                raise Forbidden("Only staff can make a label a root")
            return
        if new_parent_id == label.id:
            raise ValidationError("A label cannot be its own parent")
        if await self.session.get(Label, new_parent_id) is None:
            raise ValidationError(f"Parent label {new_parent_id} does not exist")
        if not principal.can_read_tenant(new_parent_id):
            raise Forbidden("Cannot move a label outside your hierarchy")
        if await self.resolver.is_descendant(new_parent_id, label.id):
            raise ValidationError("A label cannot be moved under one of its own sub-labels")

    async def delete_label(self, principal: Principal, label_id: str) -> None:
        """
        Delete a label and its member users.

        Refused while the label or any label below it holds a release
        outside Draft. Child labels keep their ``parent_label_id`` and the
        label's artists and Draft releases are left in place.
        """
        label = await self.session.get(Label, label_id)
        if label is None:
            raise NotFound(f"Label {label_id} not found")
        self.guard.require(principal, Action.DELETE, label)

        if await self.has_live_releases(label_id):
            raise ReferentialIntegrityError(
                "Label cannot be deleted while it or its sub-labels have submitted releases.",
                code="LABEL_HAS_RELEASES",
            )

        removed_users = await self.session.execute(delete(User).where(User.label_id == label_id))
        await self.session.delete(label)
        await self.session.commit()
        self.resolver.invalidate()
        logger.info(
            f"Label {label_id} deleted by {principal.user_id} "
            f"with {removed_users.rowcount} member users"
        )

    async def has_live_releases(self, label_id: str) -> bool:
        """True when a release outside Draft belongs to the label's subtree."""
        scope = await self.resolver.descendant_scope(label_id)
        result = await self.session.execute(
            select(func.count())
            .select_from(Release)
            .where(Release.label_id.in_(scope), Release.status != ReleaseStatus.DRAFT.value)
        )
        return result.scalar_one() > 0
