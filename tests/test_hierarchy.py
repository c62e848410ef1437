"""Tests for descendant scope resolution."""

import pytest
from sqlalchemy import update

from labelvault.models.label import Label
from labelvault.services.hierarchy import HierarchyResolver


@pytest.mark.asyncio
async def test_scope_contains_root_and_all_descendants(db_session, world):
    resolver = HierarchyResolver(db_session)

    assert await resolver.descendant_scope(world.north.id) == {
        world.north.id, world.north_east.id, world.ne_indie.id
    }
    assert await resolver.descendant_scope(world.north_east.id) == {
        world.north_east.id, world.ne_indie.id
    }
    assert await resolver.descendant_scope(world.ne_indie.id) == {world.ne_indie.id}
    assert await resolver.descendant_scope(world.south.id) == {world.south.id}


@pytest.mark.asyncio
async def test_scope_is_superset_of_every_child_scope(db_session, world):
    resolver = HierarchyResolver(db_session)
    for parent, child in [(world.north, world.north_east), (world.north_east, world.ne_indie)]:
        parent_scope = await resolver.descendant_scope(parent.id)
        child_scope = await resolver.descendant_scope(child.id)
        assert child_scope <= parent_scope
        assert parent.id in parent_scope


@pytest.mark.asyncio
async def test_unknown_and_empty_roots(db_session, world):
    resolver = HierarchyResolver(db_session)
    assert await resolver.descendant_scope("no-such-label") == {"no-such-label"}
    assert await resolver.descendant_scope(None) == frozenset()


@pytest.mark.asyncio
async def test_cyclic_data_still_terminates(db_session, world):
    # Written directly to bypass the reparent guard
    await db_session.execute(
        update(Label).where(Label.id == world.north.id).values(parent_label_id=world.ne_indie.id)
    )
    await db_session.commit()

    resolver = HierarchyResolver(db_session)
    scope = await resolver.descendant_scope(world.north_east.id)
    assert scope == {world.north.id, world.north_east.id, world.ne_indie.id}


@pytest.mark.asyncio
async def test_scope_is_memoised_until_invalidated(db_session, world):
    resolver = HierarchyResolver(db_session)
    before = await resolver.descendant_scope(world.south.id)

    db_session.add(Label(id="label-south-west", name="South West", parent_label_id=world.south.id))
    await db_session.commit()

    assert await resolver.descendant_scope(world.south.id) == before
    resolver.invalidate()
    assert await resolver.descendant_scope(world.south.id) == {world.south.id, "label-south-west"}


@pytest.mark.asyncio
async def test_parent_and_descendant_helpers(db_session, world):
    resolver = HierarchyResolver(db_session)
    assert await resolver.parent_of(world.north_east.id) == world.north.id
    assert await resolver.parent_of(world.north.id) is None
    assert await resolver.is_descendant(world.ne_indie.id, world.north.id)
    assert not await resolver.is_descendant(world.north.id, world.ne_indie.id)
