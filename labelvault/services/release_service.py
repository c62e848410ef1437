"""Release catalogue operations.

Status changes and metadata edits are delegated to ``ReleaseLifecycle``;
this module adds scoping, creation, deletion and asset uploads.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.core.exceptions import Forbidden, NotFound, ReleaseLocked, ValidationError
from labelvault.models.base import generate_uuid
from labelvault.models.label import Label
from labelvault.models.release import InteractionNote, Release, ReleaseStatus, Track
from labelvault.services.access import AccessGuard, Action, Principal
from labelvault.services.hierarchy import HierarchyResolver
from labelvault.services.release_lifecycle import (
    ReleaseLifecycle,
    UpdateOutcome,
    build_tracks,
    can_edit_metadata,
)
from labelvault.services.storage import AssetStore, build_object_key, release_prefix

logger = logging.getLogger(__name__)

ASSET_KINDS = ("artwork", "audio")

MAX_UPLOAD_BYTES = {
    "artwork": 15 * 1024 * 1024,
    "audio": 250 * 1024 * 1024,
}


class ReleaseService:
    """Releases scoped to the caller's label hierarchy."""

    def __init__(
        self,
        session: AsyncSession,
        guard: AccessGuard,
        resolver: HierarchyResolver,
        lifecycle: ReleaseLifecycle,
        asset_store: AssetStore,
    ):
        self.session = session
        self.guard = guard
        self.resolver = resolver
        self.lifecycle = lifecycle
        self.asset_store = asset_store

    async def list_releases(
        self,
        principal: Principal,
        status: Optional[str] = None,
        label_id: Optional[str] = None,
    ) -> List[Release]:
        query = select(Release).order_by(Release.created_at.desc())
        if not principal.is_staff:
            query = query.where(Release.label_id.in_(principal.scope))
        if status:
            query = query.where(Release.status == status)
        if label_id:
            query = query.where(Release.label_id == label_id)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_release(self, principal: Principal, release_id: str) -> Release:
        release = await self.session.get(Release, release_id)
        if release is None:
            raise NotFound(f"Release {release_id} not found")
        self.guard.require(principal, Action.READ, release)
        return release

    async def create_release(
        self,
        principal: Principal,
        fields: Dict[str, Any],
        label_id: Optional[str] = None,
        tracks: Optional[List[Dict[str, Any]]] = None,
        note: Optional[str] = None,
    ) -> Release:
        """Create a Draft release with its tracks numbered in supplied order."""
        label_id = label_id or principal.label_id
        if not label_id:
            raise ValidationError("labelId is required")

        release_id = generate_uuid()
        release = Release(
            id=release_id,
            **{k: v for k, v in fields.items() if k != "status"},
            label_id=label_id,
            status=ReleaseStatus.DRAFT.value,
        )
        self.guard.require(principal, Action.CREATE, release)

        if await self.session.get(Label, label_id) is None:
            raise ValidationError(f"Label {label_id} does not exist")

        self.session.add(release)
        self.session.add_all(build_tracks(release_id, tracks or []))
        if note and note.strip():
            self.session.add(InteractionNote(
                release_id=release_id,
                author_id=principal.user_id,
                author_name=principal.name,
                author_role=principal.role,
                message=note.strip(),
            ))

        await self.session.commit()
        logger.info(f"Release {release_id} created in label {label_id} by {principal.user_id}")
        return await self.lifecycle.reload(release_id)

    async def update_release(
        self,
        principal: Principal,
        release_id: str,
        changes: Dict[str, Any],
        tracks: Optional[List[Dict[str, Any]]] = None,
        note: Optional[str] = None,
        status: Optional[str] = None,
    ) -> UpdateOutcome:
        release = await self.session.get(Release, release_id)
        if release is None:
            raise NotFound(f"Release {release_id} not found")
        self.guard.require(principal, Action.WRITE, release)

        return await self.lifecycle.update(
            principal,
            release,
            changes=changes,
            tracks=tracks,
            note=note,
            target_status=status,
        )

    async def delete_release(self, principal: Principal, release_id: str) -> None:
        """
        Delete a release with its tracks and notes, then its stored assets.

        Partners may only delete Draft or Needs Info releases of their own
        label or of its direct sub-labels.
        """
        release = await self.session.get(Release, release_id)
        if release is None:
            raise NotFound(f"Release {release_id} not found")

        parent_label_id = await self.resolver.parent_of(release.label_id)
        if not self.guard.can_access(principal, Action.DELETE, release, parent_label_id):
            logger.warning(f"Denied delete of release {release_id} for user {principal.user_id}")
            raise Forbidden("Unauthorized or invalid status")

        prefix = release_prefix(release.id)

        await self.session.execute(delete(Track).where(Track.release_id == release_id))
        await self.session.execute(delete(InteractionNote).where(InteractionNote.release_id == release_id))
        await self.session.execute(delete(Release).where(Release.id == release_id))
        await self.session.commit()
        logger.info(f"Release {release_id} deleted by {principal.user_id}")

        try:
            removed = await self.asset_store.delete_prefix(prefix)
            logger.info(f"Removed {removed} stored objects under {prefix}")
        except Exception as e:
            logger.error(f"Asset cleanup for deleted release {release_id} failed: {e}")

    async def upload_asset(
        self,
        principal: Principal,
        release_id: str,
        kind: str,
        file_name: str,
        data: bytes,
        content_type: Optional[str] = None,
        track_ref: Optional[str] = None,
    ) -> Tuple[str, str]:
        """
        Store artwork or an audio master for an editable release.

        Returns:
            The public URL and the object key.
        """
        if kind not in ASSET_KINDS:
            raise ValidationError(f"Asset kind must be one of: {', '.join(ASSET_KINDS)}")
        if not file_name or "/" in file_name:
            raise ValidationError("A plain file name is required")
        if track_ref and "/" in track_ref:
            raise ValidationError("trackRef must not contain '/'")
        if not data:
            raise ValidationError("Upload body is empty")
        if len(data) > MAX_UPLOAD_BYTES[kind]:
            raise ValidationError(
                f"{kind.capitalize()} exceeds the {MAX_UPLOAD_BYTES[kind] // (1024 * 1024)}MB limit"
            )

        release = await self.session.get(Release, release_id)
        if release is None:
            raise NotFound(f"Release {release_id} not found")
        self.guard.require(principal, Action.WRITE, release)
        if not can_edit_metadata(principal, release.status):
            raise ReleaseLocked(f"Release cannot be edited while {release.status}")

        path = f"releases/{release.id}/artwork"
        if kind == "audio":
            path = f"releases/{release.id}/audio"
            if track_ref:
                path = f"{path}/{track_ref}"

        url = await self.asset_store.upload_file(data, path, file_name, content_type)
        key = build_object_key(path, file_name)
        logger.info(f"Stored {kind} {key} for release {release_id}")
        return url, key
