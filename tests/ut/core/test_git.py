"""GitClient 单元测试（替换 subprocess.run）"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from tackle.core.exceptions import CloneFailedError, RepositoryDiscoveryError
from tackle.utils.git import GitClient


def _completed(args, rc: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(args=args, returncode=rc, stdout=stdout, stderr=stderr)


class TestClone:
    def test_command_line(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: list[dict] = []

        def fake_run(cmd, **kwargs):
            calls.append({"cmd": cmd, **kwargs})
            return _completed(cmd)

        monkeypatch.setattr("tackle.utils.git.subprocess.run", fake_run)
        GitClient(timeout=15).clone("https://x/a.git", tmp_path / "d", ref="1.0", no_checkout=True)

        cmd = calls[0]["cmd"]
        assert cmd[:3] == ["git", "clone", "--quiet"]
        assert "--no-checkout" in cmd
        assert cmd[cmd.index("--branch") + 1] == "1.0"
        assert cmd[-2:] == ["https://x/a.git", str(tmp_path / "d")]
        assert calls[0]["timeout"] == 15

    def test_nonzero_exit(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(
            "tackle.utils.git.subprocess.run",
            lambda cmd, **kw: _completed(cmd, rc=128, stderr="repository not found"),
        )
        with pytest.raises(CloneFailedError, match="repository not found"):
            GitClient().clone("https://x/a.git", tmp_path / "d")

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

        monkeypatch.setattr("tackle.utils.git.subprocess.run", fake_run)
        with pytest.raises(CloneFailedError, match="超时"):
            GitClient(timeout=1).clone("https://x/a.git", tmp_path / "d")

    def test_git_missing(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr("tackle.utils.git.subprocess.run", fake_run)
        with pytest.raises(CloneFailedError):
            GitClient().clone("https://x/a.git", tmp_path / "d")


class TestQueries:
    def test_tag_names(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(
            "tackle.utils.git.subprocess.run",
            lambda cmd, **kw: _completed(cmd, stdout="1.0.0\n1.1.0\n\n"),
        )
        assert GitClient().tag_names(tmp_path) == ["1.0.0", "1.1.0"]

    def test_discover_root(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(
            "tackle.utils.git.subprocess.run",
            lambda cmd, **kw: _completed(cmd, stdout=f"{tmp_path}\n"),
        )
        assert GitClient().discover_root(tmp_path / "sub") == tmp_path

    def test_discover_root_outside_repo(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(
            "tackle.utils.git.subprocess.run",
            lambda cmd, **kw: _completed(cmd, rc=128, stderr="not a git repository"),
        )
        with pytest.raises(RepositoryDiscoveryError):
            GitClient().discover_root(tmp_path)

    def test_current_branch(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(
            "tackle.utils.git.subprocess.run",
            lambda cmd, **kw: _completed(cmd, stdout="main\n"),
        )
        assert GitClient().current_branch(tmp_path) == "main"

    def test_current_branch_detached(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        def fake_run(cmd, **kwargs):
            if cmd[1] == "symbolic-ref":
                return _completed(cmd, rc=1)
            return _completed(cmd, stdout="HEAD\n")

        monkeypatch.setattr("tackle.utils.git.subprocess.run", fake_run)
        assert GitClient().current_branch(tmp_path) == "HEAD"
