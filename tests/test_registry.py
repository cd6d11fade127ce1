import asyncio
import random

from conftest import FakeConnection
from shotboard.realtime import PALETTE, InMemoryPresenceStore, RoomRegistry


def test_join_broadcasts_presence_to_whole_room_including_joiner():
    registry = RoomRegistry()
    a, b = FakeConnection(), FakeConnection()

    async def scenario():
        await registry.join("42", "a", a, "ana@example.com")
        await registry.join("42", "b", b, "ben@example.com")

    asyncio.run(scenario())

    assert a.events() == ["room-users-update", "room-users-update"]
    assert b.events() == ["room-users-update"]

    users = b.last("room-users-update")
    assert [u["email"] for u in users] == ["ana@example.com", "ben@example.com"]
    assert all(u["color"] in PALETTE for u in users)
    assert a.last("room-users-update") == users


def test_color_comes_from_injected_rng():
    registry = RoomRegistry(rng=random.Random(7))
    expected = random.Random(7).choice(PALETTE)

    entry = asyncio.run(registry.join("42", "a", FakeConnection(), "ana"))

    assert entry.color == expected


def test_rejoin_keeps_color_and_position():
    registry = RoomRegistry()
    a, b = FakeConnection(), FakeConnection()

    async def scenario():
        first = await registry.join("42", "a", a, "ana")
        await registry.join("42", "b", b, "ben")
        again = await registry.join("42", "a", a, "ana (tab 2)")
        return first, again

    first, again = asyncio.run(scenario())

    assert again.color == first.color
    assert [u["email"] for u in registry.presence("42")] == ["ana (tab 2)", "ben"]


def test_leave_rebroadcasts_to_remaining_members():
    registry = RoomRegistry()
    a, b = FakeConnection(), FakeConnection()

    async def scenario():
        await registry.join("42", "a", a, "ana")
        await registry.join("42", "b", b, "ben")
        return await registry.leave("a")

    left = asyncio.run(scenario())

    assert left == ["42"]
    assert [u["email"] for u in b.last("room-users-update")] == ["ben"]
    # the leaver gets nothing after it is gone
    assert a.events() == ["room-users-update", "room-users-update"]


def test_leave_covers_every_room_and_drops_empty_rooms():
    registry = RoomRegistry()
    a = FakeConnection()

    async def scenario():
        await registry.join("1", "a", a, "ana")
        await registry.join("2", "a", a, "ana")
        return await registry.leave("a")

    left = asyncio.run(scenario())

    assert sorted(left) == ["1", "2"]
    assert registry.store.rooms() == []


def test_leave_without_join_is_a_noop():
    registry = RoomRegistry()

    assert asyncio.run(registry.leave("never-joined")) == []


def test_broadcast_skips_excluded_and_survives_failed_sends():
    registry = RoomRegistry()
    a, broken, c = FakeConnection(), FakeConnection(fail=True), FakeConnection()

    async def scenario():
        await registry.join("42", "a", a, "ana")
        await registry.join("42", "broken", broken, "bob")
        await registry.join("42", "c", c, "cy")
        return await registry.broadcast("42", "script-changed", {"html": "<p>x</p>"}, exclude="a")

    delivered = asyncio.run(scenario())

    assert delivered == 1
    assert "script-changed" not in a.events()
    assert c.last("script-changed") == {"html": "<p>x</p>"}


def test_rooms_are_isolated():
    registry = RoomRegistry(store=InMemoryPresenceStore())
    a, b = FakeConnection(), FakeConnection()

    async def scenario():
        await registry.join("1", "a", a, "ana")
        await registry.join("2", "b", b, "ben")
        await registry.broadcast("1", "script-changed", {"html": "one"})

    asyncio.run(scenario())

    assert "script-changed" in a.events()
    assert "script-changed" not in b.events()
