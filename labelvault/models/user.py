"""User model and the role/permission vocabulary."""

from enum import Enum
from typing import Dict, List

from sqlalchemy import Boolean, CheckConstraint, Column, Index, String, Text

from labelvault.core.database import Base
from .base import JSONType, TenantOwnedMixin, TimestampMixin, id_column


class UserRole(str, Enum):
    """Roles a platform user can hold."""

    OWNER = "Owner"
    EMPLOYEE = "Employee"
    LABEL_ADMIN = "Label Admin"
    SUB_LABEL_ADMIN = "Sub-Label Admin"
    ARTIST = "Artist"

    @classmethod
    def staff_roles(cls) -> frozenset:
        return frozenset({cls.OWNER.value, cls.EMPLOYEE.value})


class Permission(str, Enum):
    """Per-user permission flags, stored under their camelCase names."""

    MANAGE_ARTISTS = "canManageArtists"
    MANAGE_RELEASES = "canManageReleases"
    CREATE_SUB_LABELS = "canCreateSubLabels"
    SUBMIT_ALBUMS = "canSubmitAlbums"
    MANAGE_EMPLOYEES = "canManageEmployees"
    MANAGE_NETWORK = "canManageNetwork"
    VIEW_FINANCIALS = "canViewFinancials"
    ONBOARD_LABELS = "canOnboardLabels"
    DELETE_RELEASES = "canDeleteReleases"


# Flags granted to the admin user created together with a new label
LABEL_ADMIN_PERMISSIONS: Dict[str, bool] = {
    Permission.MANAGE_ARTISTS.value: True,
    Permission.MANAGE_RELEASES.value: True,
    Permission.CREATE_SUB_LABELS.value: True,
    Permission.SUBMIT_ALBUMS.value: True,
    Permission.VIEW_FINANCIALS.value: True,
}


class User(Base, TimestampMixin, TenantOwnedMixin):
    """
    A person who can sign in.

    Staff users (Owner, Employee) carry no label. Partner users (label
    admins, sub-label admins and artists) belong to exactly one label and
    see that label's descendant scope.
    """

    __tablename__ = "users"

    entity_kind = "user"

    id = id_column("Primary key UUID for user identity")

    name = Column(
        String(255),
        nullable=False,
        comment="Display name"
    )

    email = Column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login email, unique across the platform"
    )

    password_hash = Column(
        String(255),
        nullable=False,
        comment="passlib hash of the user's password"
    )

    role = Column(
        String(30),
        nullable=False,
        comment="Owner, Employee, Label Admin, Sub-Label Admin or Artist"
    )

    designation = Column(
        String(255),
        nullable=True,
        comment="Free-text job title shown on notices"
    )

    label_id = Column(
        String(36),
        nullable=True,
        index=True,
        comment="Label the user belongs to (null for staff)"
    )

    label_name = Column(
        String(255),
        nullable=True,
        comment="Denormalised label name for display"
    )

    artist_id = Column(
        String(36),
        nullable=True,
        comment="Linked artist profile for Artist users"
    )

    artist_name = Column(
        String(255),
        nullable=True,
        comment="Denormalised artist name for display"
    )

    permissions = Column(
        JSONType,
        nullable=False,
        default=dict,
        comment="Map of permission flag name to granted boolean"
    )

    is_blocked = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Blocked users cannot sign in"
    )

    block_reason = Column(
        Text,
        nullable=True,
        comment="Reason shown when a blocked user attempts to sign in"
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('Owner', 'Employee', 'Label Admin', 'Sub-Label Admin', 'Artist')",
            name="valid_user_role"
        ),
        Index("idx_users_label_role", "label_id", "role"),
    )

    @property
    def is_staff(self) -> bool:
        return self.role in UserRole.staff_roles()

    def granted_permissions(self) -> List[str]:
        """Names of the permission flags set to true on this user."""
        flags = self.permissions or {}
        return sorted(name for name, granted in flags.items() if granted)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
