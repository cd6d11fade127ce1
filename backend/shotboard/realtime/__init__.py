from .presence import InMemoryPresenceStore, PresenceEntry, PresenceStore, RedisPresenceStore
from .registry import PALETTE, RoomRegistry
from .relay import Relay, RelayClient

__all__ = [
    "InMemoryPresenceStore",
    "PresenceEntry",
    "PresenceStore",
    "RedisPresenceStore",
    "PALETTE",
    "RoomRegistry",
    "Relay",
    "RelayClient",
]
