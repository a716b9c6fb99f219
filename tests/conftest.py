"""测试公共工具: 内存中的 git 替身与清单样例"""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from tackle.core.exceptions import CloneFailedError

SIMPLE_MANIFEST = """\
name = "Example hooks"
version = "1.0.0"

[[hooks.precommit]]
id = "lint"
command = ["ruff", "check", "."]

[[hooks.precommit.conditions]]
"""


class FakeGit:
    """按 URL 登记远端仓库内容的 GitClient 替身

    remotes: url -> {"files": {相对路径: 内容}, "tags": [...]}
    """

    def __init__(self, root: Path | None = None, branch: str = "main") -> None:
        self.remotes: dict[str, dict] = {}
        self.root = root
        self.branch = branch
        self.clones: list[tuple[str, Path, str]] = []
        self._lock = threading.Lock()

    def add_remote(
        self, url: str, files: dict[str, str] | None = None, tags: list[str] | None = None,
    ) -> None:
        self.remotes[url] = {"files": files or {}, "tags": tags or []}

    def clone(self, url: str, dest: Path, *, ref: str = "", no_checkout: bool = False) -> None:
        with self._lock:
            self.clones.append((url, dest, ref))
        remote = self.remotes.get(url)
        if remote is None:
            raise CloneFailedError(f"git clone 失败 (rc=128): {url}")
        dest.mkdir(parents=True)
        (dest / ".git").mkdir()
        if no_checkout:
            (dest / ".git" / "tags").write_text("\n".join(remote["tags"]))
            return
        for rel, content in remote["files"].items():
            f = dest / rel
            f.parent.mkdir(parents=True, exist_ok=True)
            f.write_text(content)

    def tag_names(self, repo_dir: Path) -> list[str]:
        text = (repo_dir / ".git" / "tags").read_text()
        return [t for t in text.splitlines() if t]

    def discover_root(self, cwd: Path) -> Path:
        return self.root or cwd

    def current_branch(self, cwd: Path) -> str:
        return self.branch


@pytest.fixture
def fake_git(tmp_path: Path) -> FakeGit:
    project = tmp_path / "project"
    project.mkdir()
    return FakeGit(root=project)
