import threading
from collections import OrderedDict
from collections.abc import Hashable
from typing import Any

DEFAULT_CAPACITY = 1024


class BoundedCache:
    """Thread-safe LRU map with a fixed capacity.

    The least recently used entry is evicted once `capacity` is reached.
    Instances are owned by whoever creates them; nothing here is global.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            msg = f'Cache capacity should be positive, but got: {capacity}'
            raise ValueError(msg)

        self.capacity = capacity
        self._data: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            try:
                self._data.move_to_end(key)
            except KeyError:
                return default
            return self._data[key]

    def put(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self.capacity:
                self._data.popitem(last=False)

    def setdefault(self, key: Hashable, value: Any) -> Any:
        """Store `value` unless `key` is present; return the stored value either way."""
        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
                return self._data[key]

            self._data[key] = value
            while len(self._data) > self.capacity:
                self._data.popitem(last=False)
            return value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
