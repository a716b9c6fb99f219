"""包拉取流水线

fetch(raw) 步骤:
  1. 规范化包标识
  2. 目标目录 <project_root>/.tackle/hooks/<host>/<owner>/<repo>，已存在则失败（不覆盖）
  3. clone https://<host>/<owner>/<repo>.git 到目标目录
  4. 在 clone 根目录（带子路径时为对应子目录）查找 package.toml
  5. 解析清单

存在性检查为 check-then-act，仅对单进程单用户场景成立；
多进程并发拉取同一目标不做额外保护。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from tackle.core.exceptions import AlreadyFetchedError, TackleError
from tackle.core.identifier import canonicalize
from tackle.core.manifest import load_package
from tackle.core.models import CanonicalId, Package
from tackle.core.project import RepositoryContext, hooks_dir
from tackle.utils.git import GitClient

logger = logging.getLogger(__name__)


class PackageFetcher:
    """将 hook 包 clone 到项目的 .tackle/hooks 目录"""

    def __init__(self, project_root: Path, git: GitClient | None = None) -> None:
        self.project_root = project_root
        self.git = git or GitClient()

    def target_path(self, cid: CanonicalId) -> Path:
        return hooks_dir(self.project_root) / cid.repo_id

    def fetch(self, raw: str) -> Package:
        """拉取并加载包清单

        Raises:
            InvalidIdentifierError: 包标识非法
            AlreadyFetchedError: 目标目录已存在（原目录保持不变）
            CloneFailedError: clone 失败
            ManifestNotFoundError / ManifestParseError: 清单缺失或无效
        """
        cid = canonicalize(raw)
        target = self.target_path(cid)
        logger.debug("拉取 %s -> %s", cid, target)

        if target.exists():
            raise AlreadyFetchedError(
                f"包已拉取: {cid.repo_id} ({target})，如需重新拉取请先移除"
            )

        target.parent.mkdir(parents=True, exist_ok=True)
        logger.info("克隆仓库: %s", cid.clone_url)
        try:
            self.git.clone(cid.clone_url, target)
            package = load_package(target / cid.subpath)
        except TackleError:
            self._discard(target)
            raise

        logger.info("已拉取 %s (%s)", cid.repo_id, package.name or "<unnamed>")
        return package

    def _discard(self, target: Path) -> None:
        """删除失败的 checkout 及随之创建的空 host/owner 目录

        只清理本次新建的目录，已有目录在 fetch 开头已拒绝。
        """
        shutil.rmtree(target, ignore_errors=True)
        stop = hooks_dir(self.project_root)
        parent = target.parent
        while parent != stop and parent.is_dir() and not any(parent.iterdir()):
            parent.rmdir()
            logger.debug("删除空目录: %s", parent)
            parent = parent.parent


def fetch(raw: str, project_root: Path | None = None, git: GitClient | None = None) -> Package:
    """便捷入口: 未指定项目根目录时从当前目录发现"""
    if project_root is None:
        project_root = RepositoryContext(git=git).discover_project_root()
    return PackageFetcher(project_root, git=git).fetch(raw)
