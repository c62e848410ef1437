"""Revenue statement schemas."""

import datetime
from typing import List, Optional

from pydantic import Field

from .base import BaseSchema


class RevenueEntryResponse(BaseSchema):
    id: str
    label_id: str
    report_month: str
    store: str
    territory: str
    amount: float
    payment_status: str
    date: Optional[datetime.date] = None


class RevenueSummaryResponse(BaseSchema):
    entries: List[RevenueEntryResponse] = Field(default_factory=list)
    total_amount: float = 0.0
    paid_amount: float = 0.0
    pending_amount: float = 0.0

