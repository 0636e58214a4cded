"""gitlearn: a simulated git repository for practicing branching and merging."""

from .errors import CorruptRepository, GitLearnError
from .graph import GraphNode, layout, render
from .kv.base import KVStore
from .repository import (
    ALL,
    Attached,
    Commit,
    Detached,
    HeadState,
    OpResult,
    Reason,
    Repository,
    Status,
    Unset,
)
from .session import session
from .terminal import Terminal

__all__ = [
    "ALL",
    "Attached",
    "Commit",
    "CorruptRepository",
    "Detached",
    "GitLearnError",
    "GraphNode",
    "HeadState",
    "KVStore",
    "OpResult",
    "Reason",
    "Repository",
    "Status",
    "Terminal",
    "Unset",
    "layout",
    "render",
    "session",
]
