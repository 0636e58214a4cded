"""Abstract session backend interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping


class KVStore(ABC):
    """Key-value backend holding a repository session as bytes.

    Values are stored and retrieved as bytes. The repository pickles
    its own records before handing them over.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get bytes value for key, or None if not found."""

    @abstractmethod
    def get_many(self, *keys: str) -> Mapping[str, bytes]:
        """Get multiple keys, returning only keys that exist."""

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Iterate over all keys."""

    @abstractmethod
    def __contains__(self, key: str) -> bool:
        """Check if key exists in store."""

    @abstractmethod
    def apply(
        self,
        updates: Mapping[str, bytes],
        *,
        replace: bool = False,
    ) -> None:
        """Write a batch of updates as one atomic step.

        With ``replace=True`` every existing key is dropped first,
        inside the same atomic step.
        """

    @abstractmethod
    def clear(self) -> None:
        """Remove all items from the store."""

    def close(self) -> None:
        """Release any resources held by the backend."""


def check_bytes(updates: Mapping[str, bytes]) -> None:
    for key, value in updates.items():
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
