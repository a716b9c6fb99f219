"""Git 客户端 — 封装 git 可执行文件

tackle 不实现网络传输，clone / tag 列表 / 工作区发现全部委托给 git。
每次调用可设置超时，超时按该次操作失败处理，不会挂住整个解析流程。
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from tackle.core.exceptions import CloneFailedError, RepositoryDiscoveryError

logger = logging.getLogger(__name__)


class GitClient:
    """基于 subprocess 的 git 客户端"""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def _run(self, args: list[str], cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            ["git", *args],
            cwd=str(cwd) if cwd else None,
            capture_output=True, text=True, check=False,
            timeout=self.timeout,
        )

    def clone(
        self, url: str, dest: Path, *,
        ref: str = "", no_checkout: bool = False,
    ) -> None:
        """clone 仓库到 dest，失败或超时抛 CloneFailedError"""
        args = ["clone", "--quiet"]
        if no_checkout:
            args.append("--no-checkout")
        if ref:
            args += ["--branch", ref]
        args += [url, str(dest)]

        logger.debug("git clone: %s -> %s%s", url, dest, f" (ref={ref})" if ref else "")
        try:
            r = self._run(args)
        except subprocess.TimeoutExpired as e:
            raise CloneFailedError(f"git clone 超时（{self.timeout}秒）: {url}") from e
        except OSError as e:
            raise CloneFailedError(f"无法执行 git: {e}") from e
        if r.returncode != 0:
            raise CloneFailedError(
                f"git clone 失败 (rc={r.returncode}): {url}\n{r.stderr.strip()[:300]}"
            )

    def tag_names(self, repo_dir: Path) -> list[str]:
        """列出仓库中的全部 tag 名"""
        try:
            r = self._run(["tag", "--list"], cwd=repo_dir)
        except (subprocess.TimeoutExpired, OSError) as e:
            raise CloneFailedError(f"读取 tag 失败: {repo_dir}: {e}") from e
        if r.returncode != 0:
            raise CloneFailedError(
                f"git tag 失败 (rc={r.returncode}): {r.stderr.strip()[:300]}"
            )
        return [line.strip() for line in r.stdout.splitlines() if line.strip()]

    def discover_root(self, cwd: Path) -> Path:
        """向上查找包含 cwd 的 git 工作区根目录"""
        try:
            r = self._run(["rev-parse", "--show-toplevel"], cwd=cwd)
        except (subprocess.TimeoutExpired, OSError) as e:
            raise RepositoryDiscoveryError(f"无法定位 git 仓库: {e}") from e
        root = r.stdout.strip()
        if r.returncode != 0 or not root:
            raise RepositoryDiscoveryError(f"当前目录不是 git 仓库: {cwd}")
        return Path(root)

    def current_branch(self, cwd: Path) -> str:
        """当前分支名（detached HEAD 时为 'HEAD'）"""
        try:
            # symbolic-ref 对尚无提交的新分支同样有效
            r = self._run(["symbolic-ref", "--short", "-q", "HEAD"], cwd=cwd)
            if r.returncode == 0 and r.stdout.strip():
                return r.stdout.strip()
            r = self._run(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd)
        except (subprocess.TimeoutExpired, OSError) as e:
            raise RepositoryDiscoveryError(f"无法读取当前分支: {e}") from e
        if r.returncode != 0:
            raise RepositoryDiscoveryError(
                f"无法读取当前分支 (rc={r.returncode}): {r.stderr.strip()[:300]}"
            )
        return r.stdout.strip()
