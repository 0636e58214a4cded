"""Tests for the gitlearn.session() factory function."""

import pytest

from gitlearn import Repository, session
from gitlearn.kv.disk import Disk
from gitlearn.kv.memory import Memory


class TestSessionFactory:
    def test_default_is_memory(self):
        repo = session()
        assert isinstance(repo, Repository)
        assert isinstance(repo.store, Memory)

    def test_disk(self, tmp_path):
        repo = session("disk", path=str(tmp_path))
        try:
            assert isinstance(repo.store, Disk)
        finally:
            repo.store.close()

    def test_invalid_storage(self):
        with pytest.raises(ValueError, match="Unknown storage"):
            session(storage="redis")

    def test_disk_requires_path(self):
        with pytest.raises(ValueError, match="path is required"):
            session(storage="disk")

    def test_fresh_session_uninitialized(self):
        assert not session().initialized


class TestDiskSessionResume:
    def test_reopen_resumes_repository(self, tmp_path):
        repo = session("disk", path=str(tmp_path))
        repo.initialize()
        root = repo.commit("start").commit
        repo.checkout("dev", create=True)
        repo.touch("notes.txt")
        repo.store.close()

        reopened = session("disk", path=str(tmp_path))
        try:
            assert reopened.initialized
            assert reopened.branches() == {"dev": root, "main": root}
            assert reopened.current_branch == "dev"
            assert reopened.status().unstaged == ("notes.txt",)
            assert [c.message for c in reopened.log()] == ["start"]
        finally:
            reopened.store.close()

    def test_reset_persists(self, tmp_path):
        repo = session("disk", path=str(tmp_path))
        repo.initialize()
        repo.commit("start")
        repo.reset()
        repo.store.close()

        reopened = session("disk", path=str(tmp_path))
        try:
            assert not reopened.initialized
            assert reopened.log() == []
        finally:
            reopened.store.close()
