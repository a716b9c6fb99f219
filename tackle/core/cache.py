"""hook 包缓存

缓存布局: <home>/.tackle/<host>/<owner>/<repo>/...

缓存根目录在进程内只解析一次（加锁的懒加载单例），并发首次调用时
只会发生一次目录创建，所有调用方拿到同一路径。
PackageCache 也可显式传入根目录（测试或自定义布局）。
"""

from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from tackle.core.exceptions import AlreadyFetchedError, CacheDirectoryError
from tackle.core.identifier import canonicalize
from tackle.core.manifest import load_package

if TYPE_CHECKING:
    from tackle.core.models import CanonicalId, Package
    from tackle.utils.git import GitClient

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = ".tackle"

# ---- 进程级缓存根目录 ----

_cache_root: Path | None = None
_cache_lock = threading.Lock()


def resolve_cache_root() -> Path:
    """返回缓存根目录 <home>/.tackle，不存在则创建（线程安全，仅解析一次）

    Raises:
        CacheDirectoryError: 目录创建失败
    """
    global _cache_root  # noqa: PLW0603
    if _cache_root is not None:
        return _cache_root
    with _cache_lock:
        if _cache_root is None:
            root = Path.home() / CACHE_DIR_NAME
            if not root.exists():
                logger.debug("创建缓存目录: %s", root)
                try:
                    root.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise CacheDirectoryError(f"无法创建缓存目录 {root}: {e}") from e
            _cache_root = root
            logger.debug("缓存目录: %s", root)
        return _cache_root


def reset_cache_root() -> None:
    """清除已记忆的缓存根目录（仅用于测试）"""
    global _cache_root  # noqa: PLW0603
    with _cache_lock:
        _cache_root = None


class PackageCache:
    """本地包缓存 — 仅做本地查找，不访问网络（store 除外）"""

    def __init__(self, root: Path | None = None) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root if self._root is not None else resolve_cache_root()

    def repository_path(self, cid: CanonicalId) -> Path:
        return self.root / cid.repo_id

    def lookup_repository(self, cid: CanonicalId) -> Path | None:
        """已缓存则返回仓库目录，否则返回 None"""
        path = self.repository_path(cid)
        if path.exists():
            logger.debug("缓存命中: %s", path)
            return path
        logger.debug("缓存未命中: %s", path)
        return None

    def lookup_package(self, raw_id: str) -> Package | None:
        """查找并加载已缓存的包

        仅当仓库本身未缓存时返回 None；仓库已缓存但子路径或清单缺失、
        清单格式错误时抛出异常，而不是当作未命中。

        Raises:
            InvalidIdentifierError / ManifestNotFoundError / ManifestParseError
        """
        cid = canonicalize(raw_id)
        repo_dir = self.lookup_repository(cid)
        if repo_dir is None:
            return None
        return load_package(repo_dir / cid.subpath)

    def store(self, cid: CanonicalId, clone_url: str, git: GitClient, *, ref: str = "") -> Path:
        """将仓库 clone 到缓存（不覆盖已有目录）

        Raises:
            AlreadyFetchedError: 缓存中已存在该仓库
            CloneFailedError: clone 失败（已清理残留目录）
        """
        dest = self.repository_path(cid)
        if dest.exists():
            raise AlreadyFetchedError(f"缓存中已存在: {dest}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.info("缓存包: %s%s -> %s", clone_url, f"@{ref}" if ref else "", dest)
        try:
            git.clone(clone_url, dest, ref=ref)
        except Exception:
            shutil.rmtree(dest, ignore_errors=True)
            raise
        return dest

    def list_repositories(self) -> list[str]:
        """列出缓存中的全部仓库 (host/owner/repo)"""
        root = self.root
        if not root.exists():
            return []
        return sorted(
            "/".join(p.relative_to(root).parts)
            for p in root.glob("*/*/*")
            if p.is_dir() and not any(part.startswith(".") for part in p.relative_to(root).parts)
        )

    def remove(self, cid: CanonicalId) -> bool:
        """删除缓存中的仓库，返回是否实际删除"""
        path = self.repository_path(cid)
        if not path.exists():
            return False
        shutil.rmtree(path)
        logger.info("已删除缓存: %s", path)
        return True


def lookup_repository(cid: CanonicalId) -> Path | None:
    """在默认缓存中查找仓库目录"""
    return PackageCache().lookup_repository(cid)


def lookup_package(raw_id: str) -> Package | None:
    """在默认缓存中查找并加载包"""
    return PackageCache().lookup_package(raw_id)
