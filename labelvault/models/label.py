"""Label model: one node of the distribution hierarchy."""

from typing import Optional

from sqlalchemy import CheckConstraint, Column, Float, Integer, String, Text

from labelvault.core.database import Base
from .base import TenantOwnedMixin, TimestampMixin, id_column


class Label(Base, TimestampMixin, TenantOwnedMixin):
    """
    A record label or sub-label.

    Labels form a forest through ``parent_label_id``. A label without a
    parent is a root onboarded by staff. Every label owns its artists and
    releases; partner users of a label see the label and all of its
    transitive descendants.
    """

    __tablename__ = "labels"

    entity_kind = "label"

    id = id_column()

    name = Column(
        String(255),
        nullable=False,
        comment="Label name"
    )

    parent_label_id = Column(
        String(36),
        nullable=True,
        index=True,
        comment="Parent label (null for a root label)"
    )

    owner_id = Column(
        String(36),
        nullable=True,
        comment="User id of the label's administrator contact"
    )

    address = Column(Text, nullable=True, comment="Postal address")
    city = Column(String(100), nullable=True, comment="City")
    country = Column(String(100), nullable=True, comment="Country")
    tax_id = Column(String(50), nullable=True, comment="Tax identification number (GST, VAT, EIN)")
    website = Column(String(500), nullable=True, comment="Public website")
    phone = Column(String(50), nullable=True, comment="Contact phone in international format")

    revenue_share = Column(
        Float,
        nullable=True,
        comment="Percentage of net revenue paid to the label"
    )

    max_artists = Column(
        Integer,
        nullable=True,
        comment="Upper bound on artists this label may create (null for unlimited)"
    )

    status = Column(
        String(20),
        nullable=False,
        default="Active",
        comment="Active or Suspended"
    )

    __table_args__ = (
        CheckConstraint("status IN ('Active', 'Suspended')", name="valid_label_status"),
        CheckConstraint(
            "revenue_share IS NULL OR (revenue_share >= 0 AND revenue_share <= 100)",
            name="valid_revenue_share"
        ),
    )

    @property
    def owning_label_id(self) -> Optional[str]:
        return self.id

    @property
    def is_root(self) -> bool:
        return self.parent_label_id is None

    def __repr__(self) -> str:
        return f"<Label(id={self.id}, name='{self.name}', parent={self.parent_label_id})>"
