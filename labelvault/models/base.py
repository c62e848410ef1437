"""Base model classes and mixins."""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def id_column(comment: str = "Primary key UUID") -> Column:
    return Column(
        String(36),
        primary_key=True,
        default=generate_uuid,
        comment=comment,
    )


class TimestampMixin:
    """Mixin for adding created_at and updated_at timestamps."""

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="Record creation timestamp"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="Record last update timestamp"
    )


class TenantOwnedMixin:
    """
    Mixin for rows that belong to exactly one label in the hierarchy.

    ``entity_kind`` names the resource for access checks and
    ``owning_label_id`` is the label whose descendant scope must contain
    the row for a partner principal to see or change it.
    """

    entity_kind: str = ""

    @property
    def owning_label_id(self) -> Optional[str]:
        return getattr(self, "label_id", None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model instance to dictionary."""
        result = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            result[column.name] = value
        return result

    def update_from_dict(self, data: Dict[str, Any]) -> None:
        """Update mapped columns from a dictionary, ignoring unknown keys."""
        columns = self.__table__.columns.keys()
        for key, value in data.items():
            if key in columns and key != "id":
                setattr(self, key, value)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
