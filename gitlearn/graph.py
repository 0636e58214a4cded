"""Lane layout and text rendering of the commit graph."""

from dataclasses import dataclass
from typing import Mapping, Sequence

from .repository import Commit


@dataclass(frozen=True)
class GraphNode:
    """A commit placed on the graph.

    ``row`` counts from the newest commit (0) down; ``column`` is the
    lane the commit is drawn in.
    """

    commit: Commit
    row: int
    column: int
    labels: tuple[str, ...]
    is_head: bool

    @property
    def id(self) -> str:
        return self.commit.id

    @property
    def edges(self) -> tuple[tuple[str, str], ...]:
        """One ``(child, parent)`` edge per parent id."""
        return tuple((self.commit.id, p) for p in self.commit.parent_ids)


def _free_lane(lanes: list[str | None]) -> int:
    for i, expected in enumerate(lanes):
        if expected is None:
            return i
    lanes.append(None)
    return len(lanes) - 1


def _assign_lanes(newest_first: Sequence[Commit]) -> dict[str, int]:
    """Lane per commit id, walking commits newest first.

    Each lane holds the id it expects next. A commit lands in the
    lowest lane expecting it (other lanes expecting it converge and
    close) or in the lowest free lane. Its first parent is then
    expected in the same lane, further parents in free lanes.
    """
    lane_of: dict[str, int] = {}
    lanes: list[str | None] = []

    for commit in newest_first:
        waiting = [i for i, expected in enumerate(lanes) if expected == commit.id]
        if waiting:
            column = waiting[0]
            for i in waiting[1:]:
                lanes[i] = None
        else:
            column = _free_lane(lanes)
        lane_of[commit.id] = column

        parents = commit.parent_ids
        lanes[column] = parents[0] if parents else None
        for parent in parents[1:]:
            if parent not in lanes:
                lanes[_free_lane(lanes)] = parent

    return lane_of


def _labels(
    commit_id: str,
    branches: Mapping[str, str | None],
    head: str | None,
    current_branch: str | None,
) -> tuple[str, ...]:
    names = sorted(name for name, tip in branches.items() if tip == commit_id)
    if head != commit_id:
        return tuple(names)
    if current_branch is not None and current_branch in names:
        names.remove(current_branch)
        return (f"HEAD -> {current_branch}", *names)
    return ("HEAD", *names)


def layout(
    commits: Sequence[Commit],
    branches: Mapping[str, str | None],
    head: str | None,
    current_branch: str | None = None,
) -> list[GraphNode]:
    """Place commits (given in creation order) on rows and lanes.

    Returns nodes newest first.
    """
    newest_first = list(reversed(commits))
    lane_of = _assign_lanes(newest_first)
    nodes = []
    for row, commit in enumerate(newest_first):
        nodes.append(
            GraphNode(
                commit=commit,
                row=row,
                column=lane_of[commit.id],
                labels=_labels(commit.id, branches, head, current_branch),
                is_head=commit.id == head,
            )
        )
    return nodes


def render(nodes: Sequence[GraphNode]) -> list[str]:
    """Draw laid-out nodes as text, one line per commit.

    ``*`` marks the commit's lane; ``|`` marks a lane an edge passes
    through on that row.
    """
    if not nodes:
        return []
    width = max(node.column for node in nodes) + 1
    by_id = {node.id: node for node in nodes}
    passing: dict[int, set[int]] = {node.row: set() for node in nodes}

    for node in nodes:
        for i, parent_id in enumerate(node.commit.parent_ids):
            parent = by_id.get(parent_id)
            if parent is None:
                continue
            # First-parent edges run in the child's lane, merge edges in
            # the merged parent's lane.
            lane = node.column if i == 0 else parent.column
            for row in range(node.row + 1, parent.row):
                passing[row].add(lane)

    lines = []
    for node in nodes:
        cells = [" "] * width
        for lane in passing[node.row]:
            cells[lane] = "|"
        cells[node.column] = "*"
        text = f"{' '.join(cells)} {node.id}"
        if node.labels:
            text += f" ({', '.join(node.labels)})"
        lines.append(f"{text} {node.commit.message}".rstrip())
    return lines
