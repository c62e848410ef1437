"""API tests for releases."""

import pytest
from sqlalchemy import select

from labelvault.models.release import InteractionNote, Release, Track


def release_body(label_id, **overrides):
    body = {
        "title": "Monsoon Tapes",
        "labelId": label_id,
        "releaseType": "Album",
        "artworkUrl": "https://cdn.test/releases/draft-77/artwork/cover.jpg",
        "tracks": [
            {"title": "Intro", "audioUrl": "https://cdn.test/releases/draft-77/audio/1.wav"},
            {"title": "Rain"},
        ],
    }
    body.update(overrides)
    return body


async def create_release(client, headers, label_id, **overrides):
    response = await client.post("/releases", json=release_body(label_id, **overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_ignores_status_and_numbers_tracks(client, world, auth_headers):
    headers = auth_headers(world.north_east_admin)

    release = await create_release(client, headers, world.north_east.id, status="Published", note="First cut")

    assert release["status"] == "Draft"
    assert release["labelId"] == world.north_east.id
    assert [(t["trackNumber"], t["title"]) for t in release["tracks"]] == [(1, "Intro"), (2, "Rain")]
    assert [n["message"] for n in release["notes"]] == ["First cut"]


@pytest.mark.asyncio
async def test_submit_with_missing_audio_is_incomplete(client, world, auth_headers):
    headers = auth_headers(world.north_east_admin)
    release = await create_release(client, headers, world.north_east.id)

    response = await client.put(f"/releases/{release['id']}", json={"status": "Pending"}, headers=headers)

    assert response.status_code == 400
    body = response.json()
    assert body["step"] == "audio"
    assert "Track 2" in body["error"]

    detail = await client.get(f"/releases/{release['id']}", headers=headers)
    assert detail.json()["status"] == "Draft"


@pytest.mark.asyncio
async def test_full_review_cycle(client, world, auth_headers, mailer, asset_store):
    partner = auth_headers(world.north_east_admin)
    staff = auth_headers(world.employee)
    release = await create_release(client, partner, world.north_east.id, tracks=[
        {"title": "Intro", "audioUrl": "https://cdn.test/releases/draft-77/audio/1.wav"},
    ])
    url = f"/releases/{release['id']}"

    assert (await client.put(url, json={"status": "Pending"}, headers=partner)).status_code == 200

    response = await client.put(url, json={"status": "Needs Info", "note": "Add a P line"}, headers=staff)
    assert response.status_code == 200
    assert response.json()["status"] == "Needs Info"
    assert [m.to for m in mailer.outbox] == [world.north_east_admin.email]

    response = await client.put(url, json={"status": "Pending", "pLine": "2024 North East"}, headers=partner)
    assert response.status_code == 200
    body = response.json()
    assert body["pLine"] == "2024 North East"
    assert body["notes"][0]["message"] == "Resubmitted for review after corrections."

    for status in ("Approved", "Processed", "Published"):
        response = await client.put(url, json={"status": status}, headers=staff)
        assert response.status_code == 200, response.text

    response = await client.put(url, json={"status": "Takedown", "note": "DMCA claim"}, headers=staff)
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Takedown"
    assert all(track["audioUrl"] is None for track in body["tracks"])
    assert [n["message"] for n in body["notes"]].count("DMCA claim") == 1
    assert asset_store.deleted_prefixes == [f"releases/{release['id']}/audio/"]


@pytest.mark.asyncio
async def test_invalid_transition_is_rejected(client, world, auth_headers):
    headers = auth_headers(world.owner)
    release = await create_release(client, headers, world.north.id)

    response = await client.put(f"/releases/{release['id']}", json={"status": "Published"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid status transition from Draft to Published"


@pytest.mark.asyncio
async def test_track_replacement_renumbers(client, world, auth_headers, db_session):
    headers = auth_headers(world.north_admin)
    release = await create_release(client, headers, world.north.id)

    response = await client.put(
        f"/releases/{release['id']}",
        json={"tracks": [{"title": "Three"}, {"title": "One"}, {"title": "Two"}]},
        headers=headers,
    )

    assert response.status_code == 200
    assert [(t["trackNumber"], t["title"]) for t in response.json()["tracks"]] == [
        (1, "Three"), (2, "One"), (3, "Two")
    ]
    result = await db_session.execute(select(Track).where(Track.release_id == release["id"]))
    assert len(result.scalars().all()) == 3


@pytest.mark.asyncio
async def test_list_is_scoped_to_hierarchy(client, world, auth_headers):
    await create_release(client, auth_headers(world.north_east_admin), world.north_east.id, title="North East Album")
    await create_release(client, auth_headers(world.south_admin), world.south.id, title="South Album")

    north = await client.get("/releases", headers=auth_headers(world.north_admin))
    south = await client.get("/releases", headers=auth_headers(world.south_admin))
    staff = await client.get("/releases", headers=auth_headers(world.viewer))

    assert [r["title"] for r in north.json()] == ["North East Album"]
    assert [r["title"] for r in south.json()] == ["South Album"]
    assert len(staff.json()) == 2
    assert "tracks" not in north.json()[0]


@pytest.mark.asyncio
async def test_partner_cannot_touch_other_tree(client, world, auth_headers):
    release = await create_release(client, auth_headers(world.south_admin), world.south.id)
    headers = auth_headers(world.north_admin)

    assert (await client.get(f"/releases/{release['id']}", headers=headers)).status_code == 403
    response = await client.post("/releases", json=release_body(world.south.id), headers=headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_staff_without_flag_cannot_write(client, world, auth_headers):
    response = await client.post("/releases", json=release_body(world.north.id), headers=auth_headers(world.viewer))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_partner_delete_rules(client, world, auth_headers, db_session, asset_store):
    child_release = await create_release(client, auth_headers(world.north_east_admin), world.north_east.id)
    grandchild_release = await create_release(client, auth_headers(world.owner), world.ne_indie.id)
    north = auth_headers(world.north_admin)

    response = await client.delete(f"/releases/{grandchild_release['id']}", headers=north)
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized or invalid status"

    response = await client.delete(f"/releases/{child_release['id']}", headers=north)
    assert response.status_code == 204
    assert asset_store.deleted_prefixes == [f"releases/{child_release['id']}/"]

    assert await db_session.get(Release, child_release["id"]) is None
    notes = await db_session.execute(
        select(InteractionNote).where(InteractionNote.release_id == child_release["id"])
    )
    assert notes.scalars().all() == []


@pytest.mark.asyncio
async def test_partner_cannot_delete_submitted_release(client, world, auth_headers):
    headers = auth_headers(world.north_east_admin)
    release = await create_release(client, headers, world.north_east.id, tracks=[
        {"title": "Intro", "audioUrl": "https://cdn.test/1.wav"},
    ])
    await client.put(f"/releases/{release['id']}", json={"status": "Pending"}, headers=headers)

    response = await client.delete(f"/releases/{release['id']}", headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_upload_artwork(client, world, auth_headers, asset_store):
    headers = auth_headers(world.north_admin)
    release = await create_release(client, headers, world.north.id)

    response = await client.post(
        f"/releases/{release['id']}/uploads",
        params={"kind": "artwork", "fileName": "cover.jpg"},
        content=b"\xff\xd8jpeg",
        headers={**headers, "Content-Type": "image/jpeg"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["key"] == f"releases/{release['id']}/artwork/cover.jpg"
    assert body["url"] == f"https://cdn.test/{body['key']}"
    assert asset_store.objects[body["key"]] == b"\xff\xd8jpeg"


@pytest.mark.asyncio
async def test_upload_rejects_unknown_kind(client, world, auth_headers):
    headers = auth_headers(world.north_admin)
    release = await create_release(client, headers, world.north.id)

    response = await client.post(
        f"/releases/{release['id']}/uploads",
        params={"kind": "video", "fileName": "clip.mp4"},
        content=b"data",
        headers=headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_never_touches_another_releases_assets(client, world, auth_headers, asset_store):
    south = auth_headers(world.south_admin)
    south_release = await create_release(client, south, world.south.id)
    upload = await client.post(
        f"/releases/{south_release['id']}/uploads",
        params={"kind": "audio", "fileName": "master.wav"},
        content=b"RIFFwav",
        headers={**south, "Content-Type": "audio/wav"},
    )
    assert upload.status_code == 201
    south_key = upload.json()["key"]

    north = auth_headers(world.north_admin)
    decoy = await create_release(
        client, north, world.north.id,
        artworkUrl=f"https://cdn.test/releases/{south_release['id']}/artwork/x.jpg",
    )
    response = await client.delete(f"/releases/{decoy['id']}", headers=north)

    assert response.status_code == 204
    assert asset_store.deleted_prefixes == [f"releases/{decoy['id']}/"]
    assert asset_store.objects[south_key] == b"RIFFwav"
