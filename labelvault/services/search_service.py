"""Cross-entity substring search."""

import logging
from typing import Dict, List

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.models.artist import Artist
from labelvault.models.label import Label
from labelvault.models.release import Release
from labelvault.models.user import User

logger = logging.getLogger(__name__)

RESULT_LIMIT = 50


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SearchService:
    """
    Case-insensitive substring match over users, releases, artists and labels.

    Results are not filtered by the caller's hierarchy.
    """

    def __init__(self, session: AsyncSession, limit: int = RESULT_LIMIT):
        self.session = session
        self.limit = limit

    async def search(self, term: str) -> Dict[str, List]:
        term = (term or "").strip()
        pattern = f"%{_escape_like(term)}%"

        users = await self._find(
            select(User).where(
                or_(User.name.ilike(pattern, escape="\\"), User.email.ilike(pattern, escape="\\"))
            ).order_by(User.name)
        )
        releases = await self._find(
            select(Release).where(Release.title.ilike(pattern, escape="\\")).order_by(Release.title)
        )
        artists = await self._find(
            select(Artist).where(Artist.name.ilike(pattern, escape="\\")).order_by(Artist.name)
        )
        labels = await self._find(
            select(Label).where(Label.name.ilike(pattern, escape="\\")).order_by(Label.name)
        )

        logger.debug(
            f"Search '{term}': {len(users)} users, {len(releases)} releases, "
            f"{len(artists)} artists, {len(labels)} labels"
        )
        return {"users": users, "releases": releases, "artists": artists, "labels": labels}

    async def _find(self, query) -> List:
        result = await self.session.execute(query.limit(self.limit))
        return list(result.scalars().all())
