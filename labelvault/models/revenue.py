"""Revenue statement rows imported per label and month."""

from sqlalchemy import CheckConstraint, Column, Date, Float, Index, String

from labelvault.core.database import Base
from .base import TenantOwnedMixin, TimestampMixin, id_column


class RevenueEntry(Base, TimestampMixin, TenantOwnedMixin):
    """One store/territory line of a monthly royalty report."""

    __tablename__ = "revenue_entries"

    entity_kind = "revenue"

    id = id_column()

    label_id = Column(String(36), nullable=False, index=True, comment="Label the revenue is owed to")
    report_month = Column(String(7), nullable=False, comment="Reporting month as YYYY-MM")
    store = Column(String(100), nullable=False, comment="DSP or store name")
    territory = Column(String(100), nullable=False, comment="Country or region")
    amount = Column(Float, nullable=False, default=0.0, comment="Net amount")
    payment_status = Column(String(20), nullable=False, default="Pending", comment="Paid or Pending")
    date = Column(Date, nullable=True, comment="Statement date")

    __table_args__ = (
        CheckConstraint("payment_status IN ('Paid', 'Pending')", name="valid_payment_status"),
        Index("idx_revenue_label_month", "label_id", "report_month"),
    )
