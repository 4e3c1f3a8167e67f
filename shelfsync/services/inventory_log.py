"""
Bounded in-memory history of verified inventory updates, newest first.
Not persisted across restarts.
"""
import threading
from collections import deque
from typing import Optional

from shelfsync.schemas.inventory import InventoryLevelPayload, InventoryLogEntry

DEFAULT_CAPACITY = 20


class InventoryLog:
    """
    Fixed-capacity ring buffer of InventoryLogEntry.

    Only the inventory webhook handler should call record(); every other
    caller reads through entries(), which returns a copy.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._entries: deque[InventoryLogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    def record(self, payload: InventoryLevelPayload) -> InventoryLogEntry:
        """Prepend an entry stamped with the server time; the oldest falls off when full."""
        entry = InventoryLogEntry(
            inventory_item_id=payload.inventory_item_id,
            available=payload.available,
        )
        with self._lock:
            # appendleft on a full deque evicts from the right (oldest)
            self._entries.appendleft(entry)
        return entry

    def entries(self) -> list[InventoryLogEntry]:
        with self._lock:
            return list(self._entries)

    def latest(self) -> Optional[InventoryLogEntry]:
        with self._lock:
            return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)
