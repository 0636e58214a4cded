"""Tests for commit graph layout and rendering."""

import pytest

from gitlearn import Commit, Repository, layout, render


def _nodes(repo):
    status = repo.status()
    return layout(repo.log(), repo.branches(), status.head, status.branch)


@pytest.fixture
def merged():
    """root -> second on main, side on feature, merged into main."""
    repo = Repository()
    repo.initialize()
    ids = {"root": repo.commit("start").commit}
    repo.checkout("feature", create=True)
    repo.stage("f")
    ids["side"] = repo.commit("side").commit
    repo.checkout("main")
    repo.stage("m")
    ids["second"] = repo.commit("main work").commit
    ids["merge"] = repo.merge("feature").commit
    return repo, ids


class TestLayoutLinear:
    def test_empty(self):
        assert layout([], {}, None) == []
        assert render([]) == []

    def test_single_lane(self):
        repo = Repository()
        repo.initialize()
        first = repo.commit("one").commit
        repo.stage("a")
        second = repo.commit("two").commit
        nodes = _nodes(repo)
        assert [n.id for n in nodes] == [second, first]
        assert [n.row for n in nodes] == [0, 1]
        assert [n.column for n in nodes] == [0, 0]
        assert render(nodes) == [
            f"* {second} (HEAD -> main) two",
            f"* {first} one",
        ]

    def test_head_flag(self):
        repo = Repository()
        repo.initialize()
        root = repo.commit("one").commit
        nodes = _nodes(repo)
        assert nodes[0].is_head
        assert nodes[0].id == root


class TestLayoutBranches:
    def test_merge_stays_in_first_lane(self, merged):
        repo, ids = merged
        columns = {n.id: n.column for n in _nodes(repo)}
        assert columns[ids["merge"]] == 0
        assert columns[ids["second"]] == 0
        assert columns[ids["side"]] == 1
        assert columns[ids["root"]] == 0

    def test_edges_one_per_parent(self, merged):
        repo, ids = merged
        by_id = {n.id: n for n in _nodes(repo)}
        assert by_id[ids["merge"]].edges == (
            (ids["merge"], ids["second"]),
            (ids["merge"], ids["side"]),
        )
        assert by_id[ids["root"]].edges == ()

    def test_labels(self, merged):
        repo, ids = merged
        by_id = {n.id: n for n in _nodes(repo)}
        assert by_id[ids["merge"]].labels == ("HEAD -> main",)
        assert by_id[ids["side"]].labels == ("feature",)
        assert by_id[ids["root"]].labels == ()

    def test_render_draws_passing_lanes(self, merged):
        repo, ids = merged
        lines = render(_nodes(repo))
        assert lines[0].startswith("*   ")
        assert lines[1] == f"* | {ids['second']} main work"
        assert lines[2] == f"| * {ids['side']} (feature) side"
        assert lines[3] == f"*   {ids['root']} start"

    def test_unmerged_branch_gets_own_lane(self):
        repo = Repository()
        repo.initialize()
        repo.commit("start")
        repo.checkout("dev", create=True)
        repo.stage("d")
        dev = repo.commit("dev work").commit
        repo.checkout("main")
        repo.stage("m")
        main = repo.commit("main work").commit
        columns = {n.id: n.column for n in _nodes(repo)}
        assert columns[main] == 0
        assert columns[dev] == 1


class TestLabels:
    def test_detached_head_label(self):
        repo = Repository()
        repo.initialize()
        root = repo.commit("start").commit
        repo.checkout(root)
        nodes = _nodes(repo)
        assert nodes[0].labels == ("HEAD", "main")

    def test_shared_tip_labels(self):
        repo = Repository()
        repo.initialize()
        repo.commit("start")
        repo.create_branch("dev")
        nodes = _nodes(repo)
        assert nodes[0].labels == ("HEAD -> main", "dev")

    def test_layout_accepts_plain_commits(self):
        commits = [Commit("a", "one"), Commit("b", "two", ("a",))]
        nodes = layout(commits, {"main": "b"}, None)
        assert [n.labels for n in nodes] == [("main",), ()]
        assert not any(n.is_head for n in nodes)
