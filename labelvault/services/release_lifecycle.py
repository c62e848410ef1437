"""Release workflow: allowed status transitions, their guards and effects.

Every status change goes through ``ReleaseLifecycle.update``. Guards run
before anything is written; the metadata update, track replacement, note
and audio reference clearing are committed together; storage purge and
correction email happen after the commit and never undo it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault.core.exceptions import (
    Forbidden,
    IncompleteSubmission,
    InvalidTransition,
    ReleaseLocked,
    ValidationError,
)
from labelvault.models.label import Label
from labelvault.models.release import InteractionNote, Release, ReleaseStatus, Track
from labelvault.models.user import Permission, User
from labelvault.services.access import Principal
from labelvault.services.mailer import Mailer
from labelvault.services.notifications import correction_request_email, send_best_effort
from labelvault.services.storage import AssetStore, release_audio_prefix

logger = logging.getLogger(__name__)

RESUBMISSION_NOTE = "Resubmitted for review after corrections."


class Actor(str, Enum):
    """Who may fire a transition, on top of write access to the release."""

    STAFF = "staff"
    SUBMITTER = "submitter"
    LABEL_OR_STAFF = "label_or_staff"


@dataclass(frozen=True)
class TransitionRule:
    source: ReleaseStatus
    target: ReleaseStatus
    actor: Actor
    requires_note: bool = False
    checks_completeness: bool = False
    auto_note: Optional[str] = None
    purges_audio: bool = False


def _build_transitions() -> Dict[Tuple[ReleaseStatus, ReleaseStatus], TransitionRule]:
    S = ReleaseStatus
    rules = [
        TransitionRule(S.DRAFT, S.PENDING, Actor.SUBMITTER, checks_completeness=True),
        TransitionRule(S.PENDING, S.NEEDS_INFO, Actor.STAFF, requires_note=True),
        TransitionRule(
            S.NEEDS_INFO, S.PENDING, Actor.SUBMITTER,
            checks_completeness=True, auto_note=RESUBMISSION_NOTE,
        ),
        TransitionRule(S.PENDING, S.APPROVED, Actor.STAFF),
        TransitionRule(S.PENDING, S.REJECTED, Actor.STAFF, purges_audio=True),
        TransitionRule(S.APPROVED, S.PROCESSED, Actor.STAFF),
        TransitionRule(S.PROCESSED, S.PUBLISHED, Actor.STAFF),
        TransitionRule(S.PUBLISHED, S.TAKEDOWN, Actor.STAFF, purges_audio=True),
    ]
    for status in S:
        if status not in S.terminal():
            rules.append(TransitionRule(status, S.CANCELLED, Actor.LABEL_OR_STAFF))
    return {(rule.source, rule.target): rule for rule in rules}


TRANSITIONS = _build_transitions()


def find_transition(current: str, target: str) -> TransitionRule:
    """Look up the rule for an edge or raise ``InvalidTransition``."""
    try:
        key = (ReleaseStatus(current), ReleaseStatus(target))
    except ValueError:
        raise InvalidTransition(current, target)
    rule = TRANSITIONS.get(key)
    if rule is None:
        raise InvalidTransition(current, target)
    return rule


def actor_allowed(rule: TransitionRule, principal: Principal) -> bool:
    if rule.actor == Actor.STAFF:
        return principal.is_staff
    if rule.actor == Actor.SUBMITTER:
        return principal.is_staff or principal.has_permission(Permission.SUBMIT_ALBUMS)
    return True


def check_completeness(title: Optional[str], artwork_url: Optional[str], tracks: List[Dict[str, Any]]) -> None:
    """Raise ``IncompleteSubmission`` naming the first missing step."""
    if not title or not title.strip():
        raise IncompleteSubmission("details", "Release title is required before submission")
    if not artwork_url:
        raise IncompleteSubmission("artwork", "Cover artwork is required before submission")
    if not tracks:
        raise IncompleteSubmission("tracks", "At least one track is required before submission")
    for position, track in enumerate(tracks, start=1):
        if not track.get("audio_url"):
            raise IncompleteSubmission(
                "audio", f"Track {position} is missing an audio file"
            )


def can_edit_metadata(principal: Principal, status: str) -> bool:
    release_status = ReleaseStatus(status)
    if release_status in ReleaseStatus.terminal():
        return False
    if principal.is_staff:
        return True
    return release_status in ReleaseStatus.partner_editable()


def build_tracks(release_id: str, tracks: Iterable[Dict[str, Any]]) -> List[Track]:
    """Create Track rows numbered 1..N in the supplied order."""
    columns = set(Track.__table__.columns.keys()) - {"id", "release_id", "track_number"}
    rows = []
    for position, data in enumerate(tracks, start=1):
        values = {k: v for k, v in data.items() if k in columns and v is not None}
        rows.append(Track(release_id=release_id, track_number=position, **values))
    return rows


@dataclass
class UpdateOutcome:
    release: Release
    transition: Optional[TransitionRule]
    note: Optional[str]
    purged_prefix: Optional[str] = None
    notified: Optional[str] = None


class ReleaseLifecycle:
    """Applies a release update as one guarded, atomic batch."""

    def __init__(self, session: AsyncSession, asset_store: AssetStore, mailer: Mailer):
        self.session = session
        self.asset_store = asset_store
        self.mailer = mailer

    async def update(
        self,
        principal: Principal,
        release: Release,
        changes: Optional[Dict[str, Any]] = None,
        tracks: Optional[List[Dict[str, Any]]] = None,
        note: Optional[str] = None,
        target_status: Optional[str] = None,
    ) -> UpdateOutcome:
        """
        Args:
            principal: caller, already checked for write access
            release: the release as currently stored
            changes: column values to set (snake_case)
            tracks: full replacement track list, or None to keep tracks
            note: message for a new interaction note
            target_status: requested status, or None to keep it

        Raises:
            InvalidTransition: edge not in the transition table
            Forbidden: caller may not fire this transition
            ReleaseLocked: metadata edit not allowed in the current status
            ValidationError: note missing where one is required
            IncompleteSubmission: release not ready for review
        """
        changes = self._effective_changes(release, changes or {})
        note = note.strip() if note and note.strip() else None

        rule = None
        if target_status is not None and target_status != release.status:
            rule = find_transition(release.status, target_status)
            if not actor_allowed(rule, principal):
                raise Forbidden(
                    f"Not allowed to move a release from {release.status} to {target_status}"
                )

        if (changes or tracks is not None) and not can_edit_metadata(principal, release.status):
            raise ReleaseLocked(f"Release cannot be edited while {release.status}")

        if rule is not None:
            if rule.requires_note and not note:
                raise ValidationError(
                    f"A note explaining the change is required to move a release to {rule.target.value}"
                )
            if rule.checks_completeness:
                check_completeness(
                    changes.get("title", release.title),
                    changes.get("artwork_url", release.artwork_url),
                    tracks if tracks is not None else [
                        {"audio_url": t.audio_url} for t in release.tracks
                    ],
                )
            if rule.auto_note and not note:
                note = rule.auto_note

        release_id = release.id
        release.update_from_dict(changes)

        if tracks is not None:
            await self.session.execute(delete(Track).where(Track.release_id == release_id))
            self.session.add_all(build_tracks(release_id, tracks))

        if note:
            self.session.add(InteractionNote(
                release_id=release_id,
                author_id=principal.user_id,
                author_name=principal.name,
                author_role=principal.role,
                message=note,
            ))

        if rule is not None:
            release.status = rule.target.value
            if rule.purges_audio:
                await self.session.flush()
                await self.session.execute(
                    update(Track).where(Track.release_id == release_id).values(audio_url=None)
                )

        await self.session.commit()
        logger.info(
            f"Updated release {release_id} by {principal.user_id}"
            + (f": {rule.source.value} -> {rule.target.value}" if rule else "")
        )

        release = await self.reload(release_id)
        outcome = UpdateOutcome(release=release, transition=rule, note=note)

        if rule is not None and rule.purges_audio:
            outcome.purged_prefix = await self._purge_audio(release)
        if note and release.status == ReleaseStatus.NEEDS_INFO.value:
            outcome.notified = await self._notify_label(release, note, principal)

        return outcome

    async def reload(self, release_id: str) -> Release:
        self.session.expire_all()
        result = await self.session.execute(
            select(Release)
            .where(Release.id == release_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    def _effective_changes(self, release: Release, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Drop keys that would not change the stored value."""
        columns = set(Release.__table__.columns.keys()) - {"id", "status", "label_id", "created_at", "updated_at"}
        return {
            key: value for key, value in changes.items()
            if key in columns and getattr(release, key) != value
        }

    async def _purge_audio(self, release: Release) -> Optional[str]:
        prefix = release_audio_prefix(release.id)
        try:
            await self.asset_store.delete_prefix(prefix)
        except Exception as e:
            logger.error(f"Audio purge for release {release.id} under {prefix} failed: {e}")
            return None
        return prefix

    async def _notify_label(self, release: Release, note: str, principal: Principal) -> Optional[str]:
        result = await self.session.execute(
            select(User.email)
            .join(Label, Label.owner_id == User.id)
            .where(Label.id == release.label_id)
        )
        recipient = result.scalar_one_or_none()
        if not recipient:
            logger.warning(f"No label contact for correction notice on release {release.id}")
            return None

        message = correction_request_email(release.title, note, principal.name)
        if await send_best_effort(self.mailer, recipient, message):
            return recipient
        return None
