"""Tests for the release workflow."""

import itertools

import pytest
from sqlalchemy import select

from labelvault.core.exceptions import (
    DependencyFailure,
    Forbidden,
    IncompleteSubmission,
    InvalidTransition,
    ReleaseLocked,
    ValidationError,
)
from labelvault.models.release import InteractionNote, Release, ReleaseStatus, Track
from labelvault.services.access import Principal
from labelvault.services.release_lifecycle import (
    RESUBMISSION_NOTE,
    TRANSITIONS,
    ReleaseLifecycle,
    build_tracks,
    can_edit_metadata,
    check_completeness,
    find_transition,
)
from labelvault.services.storage import MemoryAssetStore

S = ReleaseStatus

ALLOWED_EDGES = {
    (S.DRAFT, S.PENDING),
    (S.PENDING, S.NEEDS_INFO),
    (S.NEEDS_INFO, S.PENDING),
    (S.PENDING, S.APPROVED),
    (S.PENDING, S.REJECTED),
    (S.APPROVED, S.PROCESSED),
    (S.PROCESSED, S.PUBLISHED),
    (S.PUBLISHED, S.TAKEDOWN),
} | {(s, S.CANCELLED) for s in S if s not in S.terminal()}


class FailingStore(MemoryAssetStore):
    async def delete_prefix(self, prefix):
        raise DependencyFailure("bucket unavailable")


def test_transition_table_is_exactly_the_allowed_edges():
    assert set(TRANSITIONS) == ALLOWED_EDGES


@pytest.mark.parametrize(
    "source,target",
    [pair for pair in itertools.product(S, S) if pair not in ALLOWED_EDGES and pair[0] != pair[1]],
)
def test_every_other_edge_is_invalid(source, target):
    with pytest.raises(InvalidTransition) as exc_info:
        find_transition(source.value, target.value)
    assert exc_info.value.message == f"Invalid status transition from {source.value} to {target.value}"


def test_terminal_states_have_no_exit():
    for state in S.terminal():
        assert not [edge for edge in TRANSITIONS if edge[0] == state]


def test_completeness_names_missing_step():
    complete_track = {"audio_url": "https://cdn.test/a.wav"}
    cases = [
        (("", "art", [complete_track]), "details"),
        (("Title", None, [complete_track]), "artwork"),
        (("Title", "art", []), "tracks"),
        (("Title", "art", [complete_track, {"audio_url": None}]), "audio"),
    ]
    for args, step in cases:
        with pytest.raises(IncompleteSubmission) as exc_info:
            check_completeness(*args)
        assert exc_info.value.step == step

    with pytest.raises(IncompleteSubmission, match="Track 2 is missing an audio file"):
        check_completeness("Title", "art", [complete_track, {"audio_url": ""}])

    check_completeness("Title", "art", [complete_track])


def test_edit_windows():
    partner = Principal(user_id="p", role="Label Admin", name="P", email="p@labels.io")
    employee = Principal(user_id="e", role="Employee", name="E", email="e@labels.io")

    assert can_edit_metadata(partner, "Draft")
    assert can_edit_metadata(partner, "Needs Info")
    assert not can_edit_metadata(partner, "Pending")
    assert can_edit_metadata(employee, "Pending")
    assert can_edit_metadata(employee, "Published")
    for state in S.terminal():
        assert not can_edit_metadata(employee, state.value)


def test_build_tracks_numbers_densely():
    rows = build_tracks("r1", [{"title": "A"}, {"title": "B", "track_number": 9}, {"title": "C"}])
    assert [(t.track_number, t.title) for t in rows] == [(1, "A"), (2, "B"), (3, "C")]
    assert all(t.release_id == "r1" for t in rows)


# Lifecycle against the database


def principal_for(user, scope=frozenset()):
    return Principal.from_user(user, scope)


async def make_release(session, label, status, tracks=None, artwork_url="https://cdn.test/releases/rel-1/artwork/cover.jpg"):
    release = Release(
        id="rel-1",
        title="Monsoon Tapes",
        label_id=label.id,
        status=status.value,
        artwork_url=artwork_url,
    )
    session.add(release)
    session.add_all(build_tracks(release.id, tracks if tracks is not None else [
        {"title": "Intro", "audio_url": "https://cdn.test/releases/rel-1/audio/1.wav"},
        {"title": "Rain", "audio_url": "https://cdn.test/releases/rel-1/audio/2.wav"},
    ]))
    await session.commit()
    return await ReleaseLifecycle(session, MemoryAssetStore(), None).reload(release.id)


async def notes_of(session, release_id):
    result = await session.execute(
        select(InteractionNote).where(InteractionNote.release_id == release_id)
    )
    return list(result.scalars().all())


async def tracks_of(session, release_id):
    session.expire_all()
    result = await session.execute(
        select(Track).where(Track.release_id == release_id).order_by(Track.track_number)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_takedown_purges_audio_and_records_note(db_session, world, mailer):
    store = MemoryAssetStore("https://cdn.test")
    store.objects["releases/rel-1/audio/1.wav"] = b"x"
    store.objects["releases/rel-1/artwork/cover.jpg"] = b"y"
    release = await make_release(db_session, world.north_east, S.PUBLISHED)

    outcome = await ReleaseLifecycle(db_session, store, mailer).update(
        principal_for(world.employee), release, note="DMCA claim", target_status="Takedown"
    )

    assert outcome.release.status == "Takedown"
    assert outcome.purged_prefix == "releases/rel-1/audio/"
    assert all(track.audio_url is None for track in await tracks_of(db_session, "rel-1"))
    notes = await notes_of(db_session, "rel-1")
    assert [n.message for n in notes] == ["DMCA claim"]
    assert notes[0].author_role == "Employee"
    assert "releases/rel-1/audio/1.wav" not in store.objects
    assert "releases/rel-1/artwork/cover.jpg" in store.objects


@pytest.mark.asyncio
async def test_purge_failure_still_commits_rejection(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.PENDING)

    outcome = await ReleaseLifecycle(db_session, FailingStore(), mailer).update(
        principal_for(world.employee), release, target_status="Rejected"
    )

    assert outcome.purged_prefix is None
    stored = await db_session.get(Release, "rel-1")
    assert stored.status == "Rejected"
    assert all(track.audio_url is None for track in await tracks_of(db_session, "rel-1"))


@pytest.mark.asyncio
async def test_purge_folder_ignores_artwork_url(db_session, world, mailer):
    store = MemoryAssetStore()
    store.objects["releases/other-release/audio/master.wav"] = b"x"
    release = await make_release(
        db_session, world.north_east, S.PENDING,
        artwork_url="https://cdn.test/releases/other-release/artwork/cover.jpg",
    )

    await ReleaseLifecycle(db_session, store, mailer).update(
        principal_for(world.employee), release, target_status="Rejected"
    )

    assert store.deleted_prefixes == ["releases/rel-1/audio/"]
    assert "releases/other-release/audio/master.wav" in store.objects


@pytest.mark.asyncio
async def test_needs_info_requires_note_and_sends_nothing_without_one(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.PENDING)

    with pytest.raises(ValidationError):
        await ReleaseLifecycle(db_session, MemoryAssetStore(), mailer).update(
            principal_for(world.employee), release, target_status="Needs Info"
        )

    assert mailer.outbox == []
    assert (await db_session.get(Release, "rel-1")).status == "Pending"


@pytest.mark.asyncio
async def test_needs_info_emails_label_owner(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.PENDING)

    outcome = await ReleaseLifecycle(db_session, MemoryAssetStore(), mailer).update(
        principal_for(world.employee), release, note="Artwork is blurry", target_status="Needs Info"
    )

    assert outcome.notified == world.north_east_admin.email
    assert len(mailer.outbox) == 1
    assert mailer.outbox[0].to == world.north_east_admin.email
    assert "Monsoon Tapes" in mailer.outbox[0].subject
    assert "Artwork is blurry" in mailer.outbox[0].text


@pytest.mark.asyncio
async def test_resubmission_writes_auto_note(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.NEEDS_INFO)
    scope = frozenset({world.north_east.id, world.ne_indie.id})

    outcome = await ReleaseLifecycle(db_session, MemoryAssetStore(), mailer).update(
        principal_for(world.north_east_admin, scope), release, target_status="Pending"
    )

    assert outcome.release.status == "Pending"
    assert [n.message for n in await notes_of(db_session, "rel-1")] == [RESUBMISSION_NOTE]
    assert mailer.outbox == []


@pytest.mark.asyncio
async def test_incomplete_submission_keeps_draft(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.DRAFT, tracks=[
        {"title": "Intro", "audio_url": "https://cdn.test/1.wav"},
        {"title": "Rain"},
    ])
    scope = frozenset({world.north_east.id})

    with pytest.raises(IncompleteSubmission) as exc_info:
        await ReleaseLifecycle(db_session, MemoryAssetStore(), mailer).update(
            principal_for(world.north_east_admin, scope), release, target_status="Pending"
        )

    assert exc_info.value.step == "audio"
    db_session.expire_all()
    assert (await db_session.get(Release, "rel-1")).status == "Draft"


@pytest.mark.asyncio
async def test_submission_uses_tracks_from_the_same_update(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.DRAFT, tracks=[{"title": "Rain"}])
    scope = frozenset({world.north_east.id})

    outcome = await ReleaseLifecycle(db_session, MemoryAssetStore(), mailer).update(
        principal_for(world.north_east_admin, scope),
        release,
        tracks=[{"title": "Rain", "audio_url": "https://cdn.test/rain.wav"}],
        target_status="Pending",
    )

    assert outcome.release.status == "Pending"
    assert [t.audio_url for t in outcome.release.tracks] == ["https://cdn.test/rain.wav"]


@pytest.mark.asyncio
async def test_partner_cannot_fire_staff_transitions(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.PENDING)
    scope = frozenset({world.north_east.id})

    with pytest.raises(Forbidden):
        await ReleaseLifecycle(db_session, MemoryAssetStore(), mailer).update(
            principal_for(world.north_east_admin, scope), release, target_status="Approved"
        )


@pytest.mark.asyncio
async def test_partner_can_cancel_and_cancel_does_not_purge(db_session, world, mailer):
    store = MemoryAssetStore()
    release = await make_release(db_session, world.north_east, S.PENDING)
    scope = frozenset({world.north_east.id})

    outcome = await ReleaseLifecycle(db_session, store, mailer).update(
        principal_for(world.north_east_admin, scope), release, target_status="Cancelled"
    )

    assert outcome.release.status == "Cancelled"
    assert store.deleted_prefixes == []
    assert all(t.audio_url for t in await tracks_of(db_session, "rel-1"))


@pytest.mark.asyncio
async def test_terminal_release_rejects_edits(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.REJECTED)

    with pytest.raises(ReleaseLocked):
        await ReleaseLifecycle(db_session, MemoryAssetStore(), mailer).update(
            principal_for(world.owner), release, changes={"title": "New title"}
        )


@pytest.mark.asyncio
async def test_partner_edit_while_pending_is_locked(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.PENDING)
    scope = frozenset({world.north_east.id})

    with pytest.raises(ReleaseLocked):
        await ReleaseLifecycle(db_session, MemoryAssetStore(), mailer).update(
            principal_for(world.north_east_admin, scope), release, changes={"genre": "Jazz"}
        )


@pytest.mark.asyncio
async def test_invalid_edge_leaves_status_unchanged(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.DRAFT)

    with pytest.raises(InvalidTransition):
        await ReleaseLifecycle(db_session, MemoryAssetStore(), mailer).update(
            principal_for(world.owner), release, target_status="Published"
        )

    db_session.expire_all()
    assert (await db_session.get(Release, "rel-1")).status == "Draft"


@pytest.mark.asyncio
async def test_notes_only_grow(db_session, world, mailer):
    release = await make_release(db_session, world.north_east, S.PENDING)
    lifecycle = ReleaseLifecycle(db_session, MemoryAssetStore(), mailer)

    release = (await lifecycle.update(principal_for(world.employee), release, note="First look")).release
    release = (await lifecycle.update(principal_for(world.employee), release, note="Second look")).release

    assert [n.message for n in release.notes] == ["Second look", "First look"]
