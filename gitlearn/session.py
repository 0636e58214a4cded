"""Session factory."""

from .kv.base import KVStore
from .repository import Repository


def session(
    storage: str = "memory",
    *,
    path: str | None = None,
) -> Repository:
    """Create a Repository with sensible defaults.

    Args:
        storage: ``"memory"`` (default) or ``"disk"``.
        path: Required when ``storage="disk"``. Directory holding the
            session; reopening it resumes the same repository.

    Returns:
        A ``Repository`` bound to the chosen backend. A fresh session
        is uninitialized until ``initialize()`` is called.
    """
    backend: KVStore
    if storage == "memory":
        from .kv.memory import Memory

        backend = Memory()
    elif storage == "disk":
        if path is None:
            raise ValueError("path is required when storage='disk'")
        from .kv.disk import Disk

        backend = Disk(path)
    else:
        raise ValueError(f"Unknown storage: {storage!r}")

    return Repository(backend)
