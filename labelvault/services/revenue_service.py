"""Read-only revenue statements."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.core.exceptions import Forbidden, ValidationError
from labelvault.models.revenue import RevenueEntry
from labelvault.services.access import AccessGuard, Principal
from labelvault.utils.validators import ReportMonthValidator, first_error_message

logger = logging.getLogger(__name__)


class RevenueService:
    def __init__(self, session: AsyncSession, guard: AccessGuard):
        self.session = session
        self.guard = guard

    async def list_entries(
        self,
        principal: Principal,
        label_id: Optional[str] = None,
        report_month: Optional[str] = None,
    ) -> List[RevenueEntry]:
        """Revenue rows visible to the caller, newest month first."""
        self.guard.require_list(principal, "revenue")

        message = first_error_message(ReportMonthValidator.validate(report_month))
        if message:
            raise ValidationError(message)

        query = select(RevenueEntry).order_by(
            RevenueEntry.report_month.desc(), RevenueEntry.store
        )
        if not principal.is_staff:
            query = query.where(RevenueEntry.label_id.in_(principal.scope))
        if label_id:
            if not principal.can_read_tenant(label_id):
                raise Forbidden("Not allowed to read revenue of this label")
            query = query.where(RevenueEntry.label_id == label_id)
        if report_month:
            query = query.where(RevenueEntry.report_month == report_month)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    @staticmethod
    def summarize(entries: List[RevenueEntry]) -> dict:
        paid = sum(e.amount for e in entries if e.payment_status == "Paid")
        pending = sum(e.amount for e in entries if e.payment_status != "Paid")
        return {
            "entries": entries,
            "total_amount": round(paid + pending, 2),
            "paid_amount": round(paid, 2),
            "pending_amount": round(pending, 2),
        }
