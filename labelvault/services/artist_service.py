"""Artist roster management."""

import logging
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.core.exceptions import NotFound, ReferentialIntegrityError, ValidationError
from labelvault.models.artist import Artist, ArtistType
from labelvault.models.label import Label
from labelvault.models.release import Release, ReleaseStatus
from labelvault.services.access import AccessGuard, Action, Principal

logger = logging.getLogger(__name__)

# Releases in these states do not pin their artists
RELEASABLE_STATUSES = (ReleaseStatus.DRAFT.value, ReleaseStatus.TAKEDOWN.value)


class ArtistService:
    def __init__(self, session: AsyncSession, guard: AccessGuard):
        self.session = session
        self.guard = guard

    async def list_artists(self, principal: Principal) -> List[Artist]:
        query = select(Artist).order_by(Artist.name)
        if not principal.is_staff:
            query = query.where(Artist.label_id.in_(principal.scope))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_artist(self, principal: Principal, artist_id: str) -> Artist:
        artist = await self.session.get(Artist, artist_id)
        if artist is None:
            raise NotFound(f"Artist {artist_id} not found")
        self.guard.require(principal, Action.READ, artist)
        return artist

    async def create_artist(self, principal: Principal, data: Dict[str, Any]) -> Artist:
        label_id = data.get("label_id") or principal.label_id
        if not label_id:
            raise ValidationError("labelId is required")

        artist = Artist(**{**data, "label_id": label_id})
        if isinstance(artist.type, ArtistType):
            artist.type = artist.type.value
        self.guard.require(principal, Action.CREATE, artist)

        label = await self.session.get(Label, label_id)
        if label is None:
            raise ValidationError(f"Label {label_id} does not exist")

        if label.max_artists is not None:
            count = await self.session.execute(
                select(func.count()).select_from(Artist).where(Artist.label_id == label_id)
            )
            if count.scalar() >= label.max_artists:
                raise ValidationError(
                    f"Label {label.name} has reached its limit of {label.max_artists} artists",
                    code="ARTIST_LIMIT_REACHED",
                )

        self.session.add(artist)
        await self.session.commit()
        logger.info(f"Artist {artist.id} created in label {label_id} by {principal.user_id}")
        return artist

    async def update_artist(self, principal: Principal, artist_id: str, changes: Dict[str, Any]) -> Artist:
        artist = await self.session.get(Artist, artist_id)
        if artist is None:
            raise NotFound(f"Artist {artist_id} not found")
        self.guard.require(principal, Action.WRITE, artist)

        if changes.get("name") is None:
            changes.pop("name", None)
        if isinstance(changes.get("type"), ArtistType):
            changes["type"] = changes["type"].value
        elif "type" in changes and changes["type"] is None:
            del changes["type"]

        artist.update_from_dict(changes)
        await self.session.commit()
        logger.info(f"Artist {artist.id} updated by {principal.user_id}")
        return artist

    async def delete_artist(self, principal: Principal, artist_id: str) -> None:
        artist = await self.session.get(Artist, artist_id)
        if artist is None:
            raise NotFound(f"Artist {artist_id} not found")
        self.guard.require(principal, Action.DELETE, artist)

        if await self.is_referenced(artist_id):
            raise ReferentialIntegrityError(
                "Artist cannot be deleted as they are linked to active or pending releases.",
                code="ARTIST_IN_USE",
            )

        await self.session.delete(artist)
        await self.session.commit()
        logger.info(f"Artist {artist_id} deleted by {principal.user_id}")

    async def is_referenced(self, artist_id: str) -> bool:
        """True when a release outside Draft/Takedown credits the artist."""
        result = await self.session.execute(
            select(Release.primary_artist_ids, Release.featured_artist_ids)
            .where(Release.status.notin_(RELEASABLE_STATUSES))
        )
        for primary, featured in result.all():
            if artist_id in (primary or []) or artist_id in (featured or []):
                return True
        return False
