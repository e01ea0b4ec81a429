from __future__ import annotations

from collections import OrderedDict
from typing import Optional

DEFAULT_CAPACITY = 5000


class TranspositionCache:
    """Bounded LRU map from a position key to its static evaluation.

    A capacity of 0 disables storage; lookups then always miss.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = max(0, capacity)
        self._table: "OrderedDict[str, float]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[float]:
        value = self._table.get(key)
        if value is None:
            self.misses += 1
            return None
        self._table.move_to_end(key)
        self.hits += 1
        return value

    def put(self, key: str, value: float) -> None:
        if self.capacity == 0:
            return
        self._table[key] = value
        self._table.move_to_end(key)
        if len(self._table) > self.capacity:
            self._table.popitem(last=False)  # least recently used

    def __contains__(self, key: str) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def reset(self) -> None:
        self._table.clear()
        self.hits = 0
        self.misses = 0
