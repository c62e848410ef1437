"""Platform notice board."""

from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, String, Text

from labelvault.core.database import Base
from .base import TenantOwnedMixin, id_column, utcnow


class NoticeType(str, Enum):
    URGENT = "Urgent"
    SYSTEM_UPDATE = "System Update"
    POLICY_CHANGE = "Policy Change"
    GENERAL_ANNOUNCEMENT = "General Announcement"
    COMPANY_EVENT = "Company Event"


class Notice(Base, TenantOwnedMixin):
    """Announcement written by staff and shown to every signed-in user."""

    __tablename__ = "notices"

    entity_kind = "notice"

    id = id_column()

    title = Column(String(255), nullable=False, comment="Headline")
    message = Column(Text, nullable=False, comment="Body")
    type = Column(
        String(30),
        nullable=False,
        default=NoticeType.GENERAL_ANNOUNCEMENT.value,
        comment="Urgent, System Update, Policy Change, General Announcement or Company Event"
    )

    author_id = Column(String(36), nullable=False, comment="Staff user who posted the notice")
    author_name = Column(String(255), nullable=False, comment="Author display name")
    author_designation = Column(String(255), nullable=True, comment="Author job title")

    target_audience = Column(
        String(50),
        nullable=False,
        default="All",
        comment="Audience hint for the dashboard"
    )

    timestamp = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="Time the notice was posted"
    )

    @property
    def owning_label_id(self) -> Optional[str]:
        return None
