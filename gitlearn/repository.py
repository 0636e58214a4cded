"""Repository: a simulated commit graph over a session backend."""

import hashlib
import logging
import os
import pickle
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from .errors import CorruptRepository
from .kv.base import KVStore
from .kv.memory import Memory

logger = logging.getLogger(__name__)

COMMIT = "__commit__%s"
BRANCH_REF = "__branch_ref__%s"
COMMIT_ORDER = "__commit_order__"
HEAD = "__head__"
INDEX = "__index__"
WORKING = "__working__"
INITIALIZED = "__initialized__"

DEFAULT_BRANCH = "main"
BOOTSTRAP_FILE = "README.md"
ID_LENGTH = 7

ALL = "."
"""Wildcard path: ``stage(ALL)`` stages the whole working set."""


class Reason(str, Enum):
    """Why an operation was rejected."""

    NOT_INITIALIZED = "not initialized"
    NOTHING_TO_COMMIT = "nothing to commit"
    NO_COMMITS = "no commits yet"
    ALREADY_EXISTS = "already exists"
    INVALID_NAME = "invalid branch name"
    NO_SUCH_BRANCH = "no such branch"
    NO_SUCH_TARGET = "no such branch or commit"
    SELF_MERGE = "already on branch"
    UP_TO_DATE = "already up to date"
    DETACHED_HEAD = "detached HEAD"
    NO_PATHS = "nothing specified"


@dataclass(frozen=True)
class OpResult:
    """Outcome of a mutating operation."""

    ok: bool
    reason: Reason | None = None
    commit: str | None = None

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class Commit:
    """An immutable node in the commit graph."""

    id: str
    message: str
    parent_ids: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parent_ids

    @property
    def is_merge(self) -> bool:
        return len(self.parent_ids) > 1


@dataclass(frozen=True)
class Unset:
    """HEAD of a repository that has not been initialized."""


@dataclass(frozen=True)
class Attached:
    """HEAD following a branch tip."""

    branch: str


@dataclass(frozen=True)
class Detached:
    """HEAD pinned to a commit."""

    commit: str


HeadState = Unset | Attached | Detached


@dataclass(frozen=True)
class Status:
    """Snapshot of the checked-out position and the index."""

    initialized: bool
    head_state: HeadState
    head: str | None
    staged: tuple[str, ...]
    unstaged: tuple[str, ...]

    @property
    def branch(self) -> str | None:
        if isinstance(self.head_state, Attached):
            return self.head_state.branch
        return None

    @property
    def detached(self) -> bool:
        return isinstance(self.head_state, Detached)


def _ok(commit: str | None = None) -> OpResult:
    return OpResult(ok=True, commit=commit)


def _dump(value: Any) -> bytes:
    return pickle.dumps(value)


class Repository:
    """A simulated repository: commits, branch refs, HEAD and index.

    Every field lives in the session backend under its own key. Each
    mutating operation validates first, builds its complete batch of
    writes, then applies it with a single ``KVStore.apply()``, so a
    rejected operation never leaves a partial update behind.

    Rejections are returned as a falsy ``OpResult`` carrying a
    ``Reason``; they never raise.
    """

    def __init__(self, store: KVStore | None = None) -> None:
        if store is None:
            store = Memory()
        self.store = store

    # -- Read operations --

    @property
    def initialized(self) -> bool:
        return self._load(INITIALIZED, False)

    def head_state(self) -> HeadState:
        return self._load(HEAD, Unset())

    def head(self) -> str | None:
        """The checked-out commit id, or None before the first commit."""
        state = self.head_state()
        if isinstance(state, Detached):
            return state.commit
        if isinstance(state, Attached):
            return self._load(BRANCH_REF % state.branch)
        return None

    @property
    def current_branch(self) -> str | None:
        """Branch HEAD is attached to, or None when detached or unset."""
        state = self.head_state()
        return state.branch if isinstance(state, Attached) else None

    def branches(self) -> dict[str, str | None]:
        """Branch name to tip commit id, sorted by name.

        ``main`` maps to None until the first commit is made.
        """
        prefix = BRANCH_REF.replace("%s", "")
        names = sorted(
            key[len(prefix):] for key in self.store.keys() if key.startswith(prefix)
        )
        return {name: self._load(BRANCH_REF % name) for name in names}

    def log(self) -> list[Commit]:
        """Every commit in creation order."""
        return [self._load_commit(cid) for cid in self._load(COMMIT_ORDER, [])]

    def get_commit(self, commit_id: str) -> Commit | None:
        return self._load(COMMIT % commit_id)

    def status(self) -> Status:
        files = self.store.get_many(INDEX, WORKING)
        staged = pickle.loads(files[INDEX]) if INDEX in files else []
        unstaged = pickle.loads(files[WORKING]) if WORKING in files else []
        return Status(
            initialized=self.initialized,
            head_state=self.head_state(),
            head=self.head(),
            staged=tuple(staged),
            unstaged=tuple(unstaged),
        )

    def resolve(self, target: str) -> str | None:
        """Resolve a branch name or commit id to a commit id."""
        if BRANCH_REF % target in self.store:
            return self._load(BRANCH_REF % target)
        if COMMIT % target in self.store:
            return target
        return None

    def history(
        self,
        start: str | None = None,
        *,
        all_parents: bool = False,
    ) -> Iterator[str]:
        """Yield commit ids from newest to oldest.

        Args:
            start: Branch name or commit id to start from (default: HEAD).
            all_parents: If True, BFS over all parents (full DAG).
                If False, follow first parent only.
        """
        current = self.head() if start is None else self.resolve(start)
        if current is None:
            return
        if not all_parents:
            while current is not None:
                yield current
                parents = self._load_commit(current).parent_ids
                current = parents[0] if parents else None
            return

        visited: set[str] = set()
        queue: deque[str] = deque([current])
        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)
            yield current
            for parent in self._load_commit(current).parent_ids:
                if parent not in visited:
                    queue.append(parent)

    # -- Write operations --

    def initialize(self) -> OpResult:
        """Start an empty repository on ``main``, wiping any previous one."""
        self.store.apply(
            {
                COMMIT_ORDER: _dump([]),
                BRANCH_REF % DEFAULT_BRANCH: _dump(None),
                HEAD: _dump(Attached(DEFAULT_BRANCH)),
                INDEX: _dump([]),
                WORKING: _dump([BOOTSTRAP_FILE]),
                INITIALIZED: _dump(True),
            },
            replace=True,
        )
        logger.debug("initialized repository on %s", DEFAULT_BRANCH)
        return _ok()

    def touch(self, name: str) -> OpResult:
        """Create or modify ``name`` in the working set."""
        if not self.initialized:
            return self._reject("touch", Reason.NOT_INITIALIZED)
        if name in self._load(INDEX, []):
            # Already staged; index and working set stay disjoint.
            return _ok()
        working = self._load(WORKING, [])
        working.append(name)
        self.store.apply({WORKING: _dump(working)})
        return _ok()

    def stage(self, *paths: str) -> OpResult:
        """Move paths from the working set to the index.

        ``ALL`` among the paths stages the whole working set. Paths that
        were never touched are staged anyway.
        """
        if not self.initialized:
            return self._reject("stage", Reason.NOT_INITIALIZED)
        if not paths:
            return self._reject("stage", Reason.NO_PATHS)

        index: list[str] = self._load(INDEX, [])
        working: list[str] = self._load(WORKING, [])
        named = [p for p in paths if p != ALL]
        if ALL in paths:
            incoming = working + named
            working = []
        else:
            incoming = named
            working = [p for p in working if p not in named]

        for path in incoming:
            if path not in index:
                index.append(path)
        self.store.apply({INDEX: _dump(index), WORKING: _dump(working)})
        logger.debug("staged %s", ", ".join(incoming) or "nothing")
        return _ok()

    def commit(self, message: str) -> OpResult:
        """Record the index as a new commit on top of HEAD.

        The very first commit is allowed with an empty index; after that
        an empty index is rejected.

        Returns:
            An OpResult whose ``commit`` is the new commit id.
        """
        if not self.initialized:
            return self._reject("commit", Reason.NOT_INITIALIZED)
        order: list[str] = self._load(COMMIT_ORDER, [])
        if not self._load(INDEX, []) and order:
            return self._reject("commit", Reason.NOTHING_TO_COMMIT)

        head = self.head()
        parents = (head,) if head is not None else ()
        commit = Commit(self._new_commit_id(parents, message), message, parents)
        diffs = self._commit_writes(commit, order)

        state = self.head_state()
        if isinstance(state, Attached):
            diffs[BRANCH_REF % state.branch] = _dump(commit.id)
        else:
            diffs[HEAD] = _dump(Detached(commit.id))

        self.store.apply(diffs)
        logger.debug("committed %s on %s", commit.id, state)
        return _ok(commit.id)

    def create_branch(self, name: str) -> OpResult:
        """Point a new branch at HEAD. Does not move HEAD."""
        if not self.initialized:
            return self._reject("branch", Reason.NOT_INITIALIZED)
        reason = self._check_new_branch(name)
        if reason is not None:
            return self._reject("branch", reason)
        head = self.head()
        self.store.apply({BRANCH_REF % name: _dump(head)})
        logger.debug("created branch %s at %s", name, head)
        return _ok(head)

    def checkout(self, target: str, *, create: bool = False) -> OpResult:
        """Move HEAD to a branch (attached) or a commit id (detached).

        Branch names win over commit ids. With ``create=True`` the
        branch is created at HEAD and checked out in one step.
        """
        if not self.initialized:
            return self._reject("checkout", Reason.NOT_INITIALIZED)

        if create:
            reason = self._check_new_branch(target)
            if reason is not None:
                return self._reject("checkout", reason)
            head = self.head()
            self.store.apply(
                {
                    BRANCH_REF % target: _dump(head),
                    HEAD: _dump(Attached(target)),
                }
            )
        elif BRANCH_REF % target in self.store:
            self.store.apply({HEAD: _dump(Attached(target))})
        elif COMMIT % target in self.store:
            self.store.apply({HEAD: _dump(Detached(target))})
        else:
            return self._reject("checkout", Reason.NO_SUCH_TARGET)

        logger.debug("checked out %s", target)
        return _ok(self.head())

    def merge(self, source: str, message: str | None = None) -> OpResult:
        """Merge ``source`` into the current branch.

        Always records a two-parent merge commit, even when one tip is an
        ancestor of the other. Parents are ordered
        ``(current tip, source tip)``.
        """
        if not self.initialized:
            return self._reject("merge", Reason.NOT_INITIALIZED)
        if BRANCH_REF % source not in self.store:
            return self._reject("merge", Reason.NO_SUCH_BRANCH)
        state = self.head_state()
        if not isinstance(state, Attached):
            return self._reject("merge", Reason.DETACHED_HEAD)
        target = state.branch
        if source == target:
            return self._reject("merge", Reason.SELF_MERGE)

        ours = self._load(BRANCH_REF % target)
        theirs = self._load(BRANCH_REF % source)
        if ours is None or theirs is None:
            return self._reject("merge", Reason.NO_COMMITS)
        if ours == theirs:
            return self._reject("merge", Reason.UP_TO_DATE)

        if message is None:
            message = f"Merge branch '{source}' into {target}"
        parents = (ours, theirs)
        commit = Commit(self._new_commit_id(parents, message), message, parents)
        diffs = self._commit_writes(commit, self._load(COMMIT_ORDER, []))
        diffs[BRANCH_REF % target] = _dump(commit.id)

        self.store.apply(diffs)
        logger.debug("merged %s into %s as %s", source, target, commit.id)
        return _ok(commit.id)

    def reset(self) -> OpResult:
        """Return to the uninitialized, empty state."""
        self.store.clear()
        logger.debug("repository reset")
        return _ok()

    # -- Internal --

    def _load(self, key: str, default: Any = None) -> Any:
        raw = self.store.get(key)
        if raw is None:
            return default
        return pickle.loads(raw)

    def _load_commit(self, commit_id: str) -> Commit:
        commit = self.get_commit(commit_id)
        if commit is None:
            raise CorruptRepository(
                f"Commit {commit_id} is referenced but missing",
                key=COMMIT % commit_id,
            )
        return commit

    def _check_new_branch(self, name: str) -> Reason | None:
        if not name or not name.strip() or name != name.strip():
            return Reason.INVALID_NAME
        if BRANCH_REF % name in self.store:
            return Reason.ALREADY_EXISTS
        if self.head() is None:
            return Reason.NO_COMMITS
        return None

    def _commit_writes(self, commit: Commit, order: list[str]) -> dict[str, bytes]:
        """Writes that add ``commit`` to the graph and clear the index."""
        for parent in commit.parent_ids:
            if COMMIT % parent not in self.store:
                raise CorruptRepository(
                    f"Parent {parent} of new commit does not exist",
                    key=COMMIT % parent,
                )
        return {
            COMMIT % commit.id: _dump(commit),
            COMMIT_ORDER: _dump(order + [commit.id]),
            INDEX: _dump([]),
            WORKING: _dump([]),
        }

    def _new_commit_id(self, parents: tuple[str, ...], message: str) -> str:
        """Short hex id from parents, message and salt; unique in this repo."""
        while True:
            h = hashlib.sha256()
            h.update(pickle.dumps((parents, message)))
            h.update(os.urandom(8))
            commit_id = h.hexdigest()[:ID_LENGTH]
            if COMMIT % commit_id not in self.store:
                return commit_id
            logger.debug("commit id %s already taken, regenerating", commit_id)

    def _reject(self, op: str, reason: Reason) -> OpResult:
        logger.info("%s rejected: %s", op, reason.value)
        return OpResult(ok=False, reason=reason)
