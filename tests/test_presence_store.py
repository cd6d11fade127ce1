import asyncio

import pytest

from conftest import FakeConnection

from shotboard.realtime import InMemoryPresenceStore, PresenceEntry, RedisPresenceStore, RoomRegistry


class DictRedis:
    """Just the hash/set commands RedisPresenceStore uses, on plain dicts."""

    def __init__(self):
        self.hashes = {}
        self.sets = {}

    def pipeline(self):
        return self

    def execute(self):
        return []

    def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value

    def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    def hdel(self, key, field):
        return 1 if self.hashes.get(key, {}).pop(field, None) is not None else 0

    def hlen(self, key):
        return len(self.hashes.get(key, {}))

    def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    def sadd(self, key, member):
        self.sets.setdefault(key, set()).add(member)

    def srem(self, key, member):
        self.sets.get(key, set()).discard(member)

    def smembers(self, key):
        return set(self.sets.get(key, set()))


@pytest.fixture(params=["memory", "redis"])
def store(request):
    if request.param == "memory":
        return InMemoryPresenceStore()
    return RedisPresenceStore(DictRedis())


def test_members_keep_join_order(store):
    store.add("42", PresenceEntry("b", "ben", "#22c55e", joined_at=2.0))
    store.add("42", PresenceEntry("a", "ana", "#3b82f6", joined_at=1.0))
    store.add("42", PresenceEntry("c", "cy", "#ec4899", joined_at=3.0))

    emails = [entry.email for entry in store.members("42")]

    if isinstance(store, InMemoryPresenceStore):
        assert emails == ["ben", "ana", "cy"]
    else:
        assert emails == ["ana", "ben", "cy"]


def test_remove_and_room_cleanup(store):
    store.add("42", PresenceEntry("a", "ana", "#3b82f6"))

    assert store.get("42", "a").email == "ana"
    assert store.rooms() == ["42"]

    assert store.remove("42", "a") is True
    assert store.remove("42", "a") is False
    assert store.get("42", "a") is None
    assert store.rooms() == []
    assert store.members("42") == []


def test_redis_store_layout():
    client = DictRedis()
    store = RedisPresenceStore(client, prefix="test")

    store.add("7", PresenceEntry("a", "ana", "#3b82f6", joined_at=1.5))

    assert client.sets["test:rooms"] == {"7"}
    assert "a" in client.hashes["test:room:7"]
    assert store.get("7", "a") == PresenceEntry("a", "ana", "#3b82f6", 1.5)


def test_presence_backend_follows_settings(monkeypatch):
    from shotboard.api.dependencies import build_presence_store
    from shotboard.core.config import settings

    monkeypatch.setattr(settings, "PRESENCE_BACKEND", "redis")
    assert isinstance(build_presence_store(), RedisPresenceStore)

    monkeypatch.setattr(settings, "PRESENCE_BACKEND", "memory")
    assert isinstance(build_presence_store(), InMemoryPresenceStore)


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_redis_members_expire_unless_touched():
    clock = Clock()
    store = RedisPresenceStore(DictRedis(), ttl=90, clock=clock)
    store.add("42", PresenceEntry("live", "ana", "#3b82f6", joined_at=1.0))
    store.add("42", PresenceEntry("ghost", "bob", "#ef4444", joined_at=2.0))

    clock.now += 60
    store.touch("42", "live")
    clock.now += 60

    assert [e.email for e in store.members("42")] == ["ana"]
    assert store.get("42", "ghost") is None
    assert store.rooms() == ["42"]

    clock.now += 91
    assert store.rooms() == []
    assert store.client.hashes.get("shotboard:presence:room:42") == {}


def test_registry_refresh_keeps_local_members_alive():
    clock = Clock()
    store = RedisPresenceStore(DictRedis(), ttl=90, clock=clock)
    registry = RoomRegistry(store=store)

    asyncio.run(registry.join("42", "a", FakeConnection(), "ana"))
    # a member written by an instance that has since died
    store.add("42", PresenceEntry("remote", "bob", "#ef4444"))

    clock.now += 60
    assert registry.refresh() == 1
    clock.now += 60

    assert registry.presence("42") == [{"email": "ana", "color": store.get("42", "a").color}]
