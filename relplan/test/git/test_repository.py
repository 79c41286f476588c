"""Tests for git/repository.py."""

from __future__ import annotations

from pathlib import Path

import pytest

import relplan.git.repository as repository_module
from relplan.core.result import Err, Ok, Result
from relplan.git.repository import Repository
from relplan.platform.process import ProcessError


def _fake_process(
    monkeypatch: pytest.MonkeyPatch, result: Result[str, ProcessError]
) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(
        cmd: list[str], cwd: Path, *, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        calls.append(cmd)
        return result

    monkeypatch.setattr(repository_module, "run_process", fake_run)
    return calls


class TestExists:
    def test_git_dir(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        assert Repository(tmp_path).exists()

    def test_worktree_file(self, tmp_path: Path) -> None:
        (tmp_path / ".git").write_text("gitdir: ../main/.git/worktrees/x\n")
        assert Repository(tmp_path).exists()

    def test_plain_directory(self, tmp_path: Path) -> None:
        assert not Repository(tmp_path).exists()


class TestTags:
    def test_lists_tags(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = _fake_process(monkeypatch, Ok("4.0.0\n4.1.0-rc1\n\n  latest \n"))

        result = Repository(tmp_path).tags()

        assert result == Ok(("4.0.0", "4.1.0-rc1", "latest"))
        assert calls == [["git", "-C", str(tmp_path), "tag", "--list"]]

    def test_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _fake_process(
            monkeypatch,
            Err(ProcessError(("git",), 128, "", "fatal: not a git repository\n")),
        )

        result = Repository(tmp_path).tags()

        assert isinstance(result, Err)
        assert result.error.message == "fatal: not a git repository"
        assert result.error.returncode == 128
