"""API tests for the notice board, revenue statements and search."""

import pytest
import pytest_asyncio

from labelvault.models.revenue import RevenueEntry


@pytest.mark.asyncio
async def test_staff_posts_notice_everyone_reads(client, world, auth_headers):
    response = await client.post(
        "/notices",
        json={"title": "Holiday freeze", "message": "No deliveries on the 25th", "type": "Urgent"},
        headers=auth_headers(world.viewer),
    )

    assert response.status_code == 201
    notice = response.json()
    assert notice["authorId"] == world.viewer.id
    assert notice["authorName"] == "Vera Viewer"
    assert notice["authorDesignation"] == "Staff"
    assert notice["targetAudience"] == "All"

    listed = await client.get("/notices", headers=auth_headers(world.south_admin))
    assert [n["title"] for n in listed.json()] == ["Holiday freeze"]


@pytest.mark.asyncio
async def test_partner_cannot_post_notice(client, world, auth_headers):
    response = await client.post(
        "/notices", json={"title": "Hi", "message": "From a label"}, headers=auth_headers(world.north_admin)
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_edit_and_delete_notice(client, world, auth_headers):
    headers = auth_headers(world.owner)
    notice = (await client.post("/notices", json={"title": "Draft", "message": "v1"}, headers=headers)).json()

    response = await client.put(f"/notices/{notice['id']}", json={"message": "v2"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "v2"
    assert response.json()["title"] == "Draft"

    assert (await client.delete(f"/notices/{notice['id']}", headers=headers)).status_code == 204
    assert (await client.delete(f"/notices/{notice['id']}", headers=headers)).status_code == 404


@pytest_asyncio.fixture
async def statements(world, session_factory):
    async with session_factory() as session:
        session.add_all([
            RevenueEntry(label_id=world.north.id, report_month="2024-05", store="Spotify",
                         territory="IN", amount=120.5, payment_status="Paid"),
            RevenueEntry(label_id=world.north_east.id, report_month="2024-05", store="JioSaavn",
                         territory="IN", amount=30.25, payment_status="Pending"),
            RevenueEntry(label_id=world.north_east.id, report_month="2024-04", store="Apple Music",
                         territory="US", amount=10.0, payment_status="Paid"),
            RevenueEntry(label_id=world.south.id, report_month="2024-05", store="Spotify",
                         territory="IN", amount=999.0, payment_status="Paid"),
        ])
        await session.commit()


@pytest.mark.asyncio
async def test_revenue_is_scoped_with_totals(client, world, auth_headers, statements):
    response = await client.get("/revenue", headers=auth_headers(world.north_admin))

    assert response.status_code == 200
    body = response.json()
    assert len(body["entries"]) == 3
    assert body["totalAmount"] == 160.75
    assert body["paidAmount"] == 130.5
    assert body["pendingAmount"] == 30.25


@pytest.mark.asyncio
async def test_revenue_filters(client, world, auth_headers, statements):
    headers = auth_headers(world.north_admin)

    response = await client.get(
        "/revenue", params={"labelId": world.north_east.id, "reportMonth": "2024-05"}, headers=headers
    )
    assert [e["store"] for e in response.json()["entries"]] == ["JioSaavn"]

    response = await client.get("/revenue", params={"labelId": world.south.id}, headers=headers)
    assert response.status_code == 403

    response = await client.get("/revenue", params={"reportMonth": "May 2024"}, headers=headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_revenue_needs_financials_flag(client, world, auth_headers, statements):
    assert (await client.get("/revenue", headers=auth_headers(world.employee))).status_code == 403

    response = await client.get("/revenue", headers=auth_headers(world.owner))
    assert response.status_code == 200
    assert len(response.json()["entries"]) == 4


@pytest.mark.asyncio
async def test_search_spans_entities(client, world, auth_headers):
    headers = auth_headers(world.owner)
    await client.post("/artists", json={"name": "North Star", "labelId": world.north.id}, headers=headers)
    await client.post("/releases", json={"title": "Northern Soul", "labelId": world.north.id}, headers=headers)

    response = await client.get("/search", params={"q": "NORTH"}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert {u["name"] for u in body["users"]} == {"Nora North"}
    assert [r["title"] for r in body["releases"]] == ["Northern Soul"]
    assert [a["name"] for a in body["artists"]] == ["North Star"]
    assert [label["name"] for label in body["labels"]] == ["North East", "North East Indie", "North Records"]


@pytest.mark.asyncio
async def test_search_is_not_scoped_to_hierarchy(client, world, auth_headers):
    response = await client.get("/search", params={"q": "south"}, headers=auth_headers(world.north_east_admin))

    body = response.json()
    assert [label["name"] for label in body["labels"]] == ["South Sounds"]
    assert [u["email"] for u in body["users"]] == [world.south_admin.email]


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(client, world, auth_headers):
    response = await client.get("/search", params={"q": "%"}, headers=auth_headers(world.owner))

    body = response.json()
    assert body == {"users": [], "releases": [], "artists": [], "labels": []}
