"""Fixed-capacity cache with drop-oldest eviction."""

from collections import OrderedDict
from typing import Any, Hashable, Optional


class BoundedCache:
    """
    Insertion-ordered mapping that never holds more than `capacity` entries.

    When full, putting a new key evicts the oldest inserted key. Reads do
    not refresh an entry's age. Stored values must not be None, since get()
    uses None to mean "not cached".
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()

    def get(self, key: Hashable) -> Optional[Any]:
        return self._entries.get(key)

    def put(self, key: Hashable, value: Any) -> None:
        if key in self._entries:
            self._entries[key] = value
            return
        while len(self._entries) >= self.capacity:
            self._entries.popitem(last=False)
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
