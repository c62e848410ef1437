"""API tests for the artist roster."""

import pytest
from sqlalchemy import update

from labelvault.models.label import Label
from labelvault.models.release import Release


async def create_artist(client, headers, **body):
    response = await client.post("/artists", json={"name": "Asha", **body}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def credit_in_release(client, headers, label_id, artist_id, featured=False):
    key = "featuredArtistIds" if featured else "primaryArtistIds"
    response = await client.post(
        "/releases",
        json={"title": "Credits", "labelId": label_id, key: [artist_id]},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]


@pytest.mark.asyncio
async def test_partner_creates_artist_in_own_label(client, world, auth_headers):
    artist = await create_artist(client, auth_headers(world.south_admin), type="Band")

    assert artist["labelId"] == world.south.id
    assert artist["type"] == "Band"


@pytest.mark.asyncio
async def test_list_is_scoped(client, world, auth_headers):
    await create_artist(client, auth_headers(world.north_east_admin), name="Northern Lights")
    await create_artist(client, auth_headers(world.south_admin), name="Southern Cross")

    north = await client.get("/artists", headers=auth_headers(world.north_admin))
    staff = await client.get("/artists", headers=auth_headers(world.viewer))

    assert [a["name"] for a in north.json()] == ["Northern Lights"]
    assert [a["name"] for a in staff.json()] == ["Northern Lights", "Southern Cross"]


@pytest.mark.asyncio
async def test_label_artist_limit(client, world, auth_headers, db_session):
    await db_session.execute(update(Label).where(Label.id == world.south.id).values(max_artists=1))
    await db_session.commit()
    headers = auth_headers(world.south_admin)

    await create_artist(client, headers, name="First")
    response = await client.post("/artists", json={"name": "Second"}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {
        "error": "Label South Sounds has reached its limit of 1 artists",
        "code": "ARTIST_LIMIT_REACHED",
    }


@pytest.mark.asyncio
async def test_update_artist(client, world, auth_headers):
    headers = auth_headers(world.employee)
    artist = await create_artist(client, headers, labelId=world.north.id)

    response = await client.put(
        f"/artists/{artist['id']}", json={"spotifyId": "4Z8W4fKeB5YxbusRsdQVPb"}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["spotifyId"] == "4Z8W4fKeB5YxbusRsdQVPb"
    assert response.json()["name"] == "Asha"


@pytest.mark.asyncio
async def test_artist_in_draft_release_can_be_deleted(client, world, auth_headers):
    headers = auth_headers(world.north_admin)
    artist = await create_artist(client, headers)
    await credit_in_release(client, headers, world.north.id, artist["id"])

    response = await client.delete(f"/artists/{artist['id']}", headers=headers)

    assert response.status_code == 204
    assert (await client.get(f"/artists/{artist['id']}", headers=headers)).status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("featured", [False, True])
async def test_artist_in_pending_release_cannot_be_deleted(client, world, auth_headers, db_session, featured):
    headers = auth_headers(world.north_admin)
    artist = await create_artist(client, headers)
    release_id = await credit_in_release(client, headers, world.north.id, artist["id"], featured=featured)
    await db_session.execute(update(Release).where(Release.id == release_id).values(status="Pending"))
    await db_session.commit()

    response = await client.delete(f"/artists/{artist['id']}", headers=headers)

    assert response.status_code == 400
    assert response.json()["error"] == (
        "Artist cannot be deleted as they are linked to active or pending releases."
    )


@pytest.mark.asyncio
async def test_staff_needs_artist_flag(client, world, auth_headers):
    response = await client.post(
        "/artists", json={"name": "Nope", "labelId": world.north.id}, headers=auth_headers(world.viewer)
    )
    assert response.status_code == 403
