"""Principal capabilities and the access guard.

Route handlers and services never compare role strings. They ask the
``Principal`` what it can do, and the ``AccessGuard`` combines those
capabilities with the entity being touched.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Optional

from labelvault.core.exceptions import Forbidden
from labelvault.models.release import ReleaseStatus
from labelvault.models.user import Permission, User, UserRole

logger = logging.getLogger(__name__)


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    WRITE = "write"
    DELETE = "delete"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of one request."""

    user_id: str
    role: str
    name: str
    email: str
    label_id: Optional[str] = None
    artist_id: Optional[str] = None
    permissions: FrozenSet[str] = field(default_factory=frozenset)
    scope: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user: User, scope: FrozenSet[str] = frozenset()) -> "Principal":
        return cls(
            user_id=user.id,
            role=user.role,
            name=user.name,
            email=user.email,
            label_id=user.label_id,
            artist_id=user.artist_id,
            permissions=frozenset(user.granted_permissions()),
            scope=frozenset() if user.is_staff else frozenset(scope),
        )

    @property
    def is_owner(self) -> bool:
        return self.role == UserRole.OWNER.value

    @property
    def is_staff(self) -> bool:
        return self.role in UserRole.staff_roles()

    def has_permission(self, permission: Permission) -> bool:
        return self.is_owner or permission.value in self.permissions

    def can_read_tenant(self, label_id: Optional[str]) -> bool:
        """Staff see every tenant; partners see their descendant scope."""
        if self.is_staff:
            return True
        return label_id is not None and label_id in self.scope

    def is_own_label(self, label_id: Optional[str]) -> bool:
        return self.label_id is not None and self.label_id == label_id


class AccessGuard:
    """Decides whether a principal may perform an action on an entity."""

    def can_access(
        self,
        principal: Principal,
        action: Action,
        entity: Any,
        parent_label_id: Optional[str] = None,
    ) -> bool:
        """
        Args:
            principal: the caller
            action: what the caller wants to do
            entity: a model instance exposing ``entity_kind`` and
                ``owning_label_id``
            parent_label_id: for release deletion, the parent of the
                release's label
        """
        kind = entity.entity_kind

        if principal.is_owner:
            return True
        if principal.is_staff:
            return self._staff_can(principal, action, kind, entity)
        return self._partner_can(principal, action, kind, entity, parent_label_id)

    def require(
        self,
        principal: Principal,
        action: Action,
        entity: Any,
        parent_label_id: Optional[str] = None,
    ) -> None:
        if not self.can_access(principal, action, entity, parent_label_id):
            logger.warning(
                f"Denied {action.value} on {entity.entity_kind} {getattr(entity, 'id', None)} "
                f"for user {principal.user_id}"
            )
            raise Forbidden(f"Not allowed to {action.value} this {entity.entity_kind}")

    def can_list(self, principal: Principal, kind: str) -> bool:
        """Collection-level check; rows are then filtered by scope."""
        if kind == "revenue":
            return principal.has_permission(Permission.VIEW_FINANCIALS)
        return True

    def require_list(self, principal: Principal, kind: str) -> None:
        if not self.can_list(principal, kind):
            raise Forbidden(f"Not allowed to list {kind}")

    # Staff

    def _staff_can(self, principal: Principal, action: Action, kind: str, entity: Any) -> bool:
        if kind == "revenue":
            return principal.has_permission(Permission.VIEW_FINANCIALS)
        if action == Action.READ:
            return True
        if kind == "notice":
            return True
        if kind == "label":
            if action == Action.CREATE:
                return (
                    principal.has_permission(Permission.ONBOARD_LABELS)
                    or principal.has_permission(Permission.MANAGE_NETWORK)
                )
            return principal.has_permission(Permission.MANAGE_NETWORK)
        if kind == "user":
            return principal.has_permission(Permission.MANAGE_EMPLOYEES)
        if kind == "artist":
            return principal.has_permission(Permission.MANAGE_ARTISTS)
        if kind == "release":
            if action == Action.DELETE:
                return principal.has_permission(Permission.DELETE_RELEASES)
            return principal.has_permission(Permission.MANAGE_RELEASES)
        return False

    # Partners

    def _partner_can(
        self,
        principal: Principal,
        action: Action,
        kind: str,
        entity: Any,
        parent_label_id: Optional[str],
    ) -> bool:
        if kind == "notice":
            return action == Action.READ

        if kind == "user" and action == Action.READ and entity.id == principal.user_id:
            return True

        if kind == "label" and action == Action.CREATE:
            scoped_label = entity.parent_label_id
        else:
            scoped_label = entity.owning_label_id

        if not principal.can_read_tenant(scoped_label):
            return False

        if kind == "revenue":
            return action == Action.READ and principal.has_permission(Permission.VIEW_FINANCIALS)

        if action == Action.READ:
            return True

        if kind == "label":
            return self._partner_label_write(principal, action, entity)
        if kind == "user":
            return (
                principal.has_permission(Permission.CREATE_SUB_LABELS)
                or principal.has_permission(Permission.MANAGE_ARTISTS)
            )
        if kind == "artist":
            return principal.has_permission(Permission.MANAGE_ARTISTS)
        if kind == "release":
            if action == Action.DELETE:
                return self._partner_release_delete(principal, entity, parent_label_id)
            return principal.has_permission(Permission.MANAGE_RELEASES)
        return False

    def _partner_label_write(self, principal: Principal, action: Action, label: Any) -> bool:
        own_label = principal.is_own_label(label.id)
        if action == Action.WRITE and own_label:
            return True
        if action == Action.DELETE and own_label:
            return False
        return principal.has_permission(Permission.CREATE_SUB_LABELS)

    def _partner_release_delete(
        self, principal: Principal, release: Any, parent_label_id: Optional[str]
    ) -> bool:
        # Narrower than write scope: own label or its direct children only
        if release.status not in (ReleaseStatus.DRAFT.value, ReleaseStatus.NEEDS_INFO.value):
            return False
        return principal.is_own_label(release.label_id) or principal.is_own_label(parent_label_id)


_access_guard = AccessGuard()


def get_access_guard() -> AccessGuard:
    return _access_guard
