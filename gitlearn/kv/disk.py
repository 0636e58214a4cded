"""Disk-backed session backend using diskcache."""

from typing import Iterable, Mapping, cast

from .base import KVStore, check_bytes

ONE_HUNDRED_MB = 100 * 1024 * 1024


class Disk(KVStore):
    """Session stored in a diskcache directory (SQLite + mmap).

    Reopening the same directory resumes the session.
    """

    def __init__(self, directory: str, size_limit: int = ONE_HUNDRED_MB) -> None:
        from diskcache import Cache as DiskCache

        self.store = DiskCache(directory, size_limit=size_limit)

    def get(self, key: str) -> bytes | None:
        return cast(bytes | None, self.store.get(key))

    def get_many(self, *keys: str) -> Mapping[str, bytes]:
        return {k: v for k in keys if (v := self.get(k)) is not None}

    def keys(self) -> Iterable[str]:
        for key in self.store.iterkeys():
            yield str(key)

    def __contains__(self, key: str) -> bool:
        return key in self.store

    def apply(
        self,
        updates: Mapping[str, bytes],
        *,
        replace: bool = False,
    ) -> None:
        check_bytes(updates)
        with self.store.transact():
            if replace:
                for key in list(self.store.iterkeys()):
                    self.store.delete(key, retry=False)
            for key, value in updates.items():
                self.store[key] = value

    def clear(self) -> None:
        self.store.clear()

    def close(self) -> None:
        self.store.close()
