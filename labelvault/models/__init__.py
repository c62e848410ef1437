"""Database models for the label distribution service."""

from .base import JSONType, TenantOwnedMixin, TimestampMixin
from .user import LABEL_ADMIN_PERMISSIONS, Permission, User, UserRole
from .label import Label
from .artist import Artist, ArtistType
from .release import InteractionNote, Release, ReleaseStatus, ReleaseType, Track
from .notice import Notice, NoticeType
from .revenue import RevenueEntry

__all__ = [
    "JSONType",
    "TenantOwnedMixin",
    "TimestampMixin",
    "LABEL_ADMIN_PERMISSIONS",
    "Permission",
    "User",
    "UserRole",
    "Label",
    "Artist",
    "ArtistType",
    "InteractionNote",
    "Release",
    "ReleaseStatus",
    "ReleaseType",
    "Track",
    "Notice",
    "NoticeType",
    "RevenueEntry",
]
