"""Platform notice board."""

import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.core.exceptions import NotFound
from labelvault.models.notice import Notice, NoticeType
from labelvault.models.user import User
from labelvault.services.access import AccessGuard, Action, Principal

logger = logging.getLogger(__name__)


class NoticeService:
    """Notices are visible to everyone and written by staff."""

    def __init__(self, session: AsyncSession, guard: AccessGuard):
        self.session = session
        self.guard = guard

    async def list_notices(self) -> List[Notice]:
        result = await self.session.execute(select(Notice).order_by(Notice.timestamp.desc()))
        return list(result.scalars().all())

    async def create_notice(self, principal: Principal, data: Dict[str, Any]) -> Notice:
        author = await self.session.get(User, principal.user_id)
        notice = Notice(
            title=data["title"],
            message=data["message"],
            type=NoticeType(data["type"]).value,
            target_audience=data.get("target_audience") or "All",
            author_id=principal.user_id,
            author_name=principal.name or "Admin",
            author_designation=(author.designation if author else None) or "Staff",
        )
        self.guard.require(principal, Action.CREATE, notice)

        self.session.add(notice)
        await self.session.commit()
        logger.info(f"Notice {notice.id} posted by {principal.user_id}")
        return notice

    async def update_notice(self, principal: Principal, notice_id: str, changes: Dict[str, Any]) -> Notice:
        notice = await self.session.get(Notice, notice_id)
        if notice is None:
            raise NotFound(f"Notice {notice_id} not found")
        self.guard.require(principal, Action.WRITE, notice)

        if changes.get("type") is not None:
            changes["type"] = NoticeType(changes["type"]).value
        notice.update_from_dict({k: v for k, v in changes.items() if v is not None})
        await self.session.commit()
        return notice

    async def delete_notice(self, principal: Principal, notice_id: str) -> None:
        notice = await self.session.get(Notice, notice_id)
        if notice is None:
            raise NotFound(f"Notice {notice_id} not found")
        self.guard.require(principal, Action.DELETE, notice)

        await self.session.delete(notice)
        await self.session.commit()
        logger.info(f"Notice {notice_id} deleted by {principal.user_id}")
