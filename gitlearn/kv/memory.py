"""In-memory session backend."""

import threading
from typing import Iterable, Mapping

from .base import KVStore, check_bytes


class Memory(KVStore):
    """A dict-backed session that lives as long as the process."""

    def __init__(self) -> None:
        self.memory: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        return self.memory.get(key)

    def get_many(self, *keys: str) -> Mapping[str, bytes]:
        return {key: val for key in keys if (val := self.memory.get(key)) is not None}

    def keys(self) -> Iterable[str]:
        return list(self.memory.keys())

    def __contains__(self, key: str) -> bool:
        return key in self.memory

    def apply(
        self,
        updates: Mapping[str, bytes],
        *,
        replace: bool = False,
    ) -> None:
        check_bytes(updates)
        with self._lock:
            if replace:
                self.memory = dict(updates)
            else:
                self.memory.update(updates)

    def clear(self) -> None:
        with self._lock:
            self.memory.clear()
