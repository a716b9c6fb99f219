"""项目（安装了 tackle 的 git 仓库）

职责:
- RepositoryContext: 发现项目根目录与当前分支
- init_project / is_initialized: 创建 .tackle 目录骨架
- ProjectManifest: .tackle/tackle.yml 中记录已安装的包

目录布局:
    <project_root>/.tackle/
        tackle.yml       已安装包注册表
        .gitignore       忽略 hooks/
        hooks/<host>/<owner>/<repo>/...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from tackle.core.exceptions import AlreadyInitializedError, NotInitializedError
from tackle.core.registry import YamlRegistry
from tackle.utils.git import GitClient
from tackle.utils.yaml_io import atomic_write, save_yaml

logger = logging.getLogger(__name__)

TACKLE_DIR = ".tackle"
HOOKS_DIR = "hooks"
MANIFEST_FILE = "tackle.yml"
MANIFEST_VERSION = "1"
DEFAULT_GITIGNORE = "hooks/\n"
MANIFEST_HEADER = "tackle 已安装包注册表，请使用 tackle add / tackle remove 修改"


class RepositoryContext:
    """当前 git 工作区上下文"""

    def __init__(self, cwd: Path | None = None, git: GitClient | None = None) -> None:
        self.cwd = cwd or Path.cwd()
        self.git = git or GitClient()
        self._root: Path | None = None

    def discover_project_root(self) -> Path:
        """项目根目录（首次发现后记住）

        Raises:
            RepositoryDiscoveryError: 不在 git 工作区内
        """
        if self._root is None:
            self._root = self.git.discover_root(self.cwd)
            logger.debug("项目根目录: %s", self._root)
        return self._root

    def current_branch_name(self) -> str:
        """当前分支名，每次实时读取"""
        return self.git.current_branch(self.cwd)


def tackle_dir(root: Path) -> Path:
    return root / TACKLE_DIR


def hooks_dir(root: Path) -> Path:
    return root / TACKLE_DIR / HOOKS_DIR


def is_initialized(root: Path) -> bool:
    return tackle_dir(root).is_dir()


def init_project(root: Path) -> Path:
    """在项目根目录下创建 .tackle 骨架，返回 .tackle 路径

    Raises:
        AlreadyInitializedError: .tackle 已存在
    """
    path = tackle_dir(root)
    if path.exists():
        raise AlreadyInitializedError(f"项目已初始化: {path}")

    logger.info("初始化 tackle 项目: %s", root)
    hooks_dir(root).mkdir(parents=True)
    save_yaml(
        path / MANIFEST_FILE, {"version": MANIFEST_VERSION, "packages": {}},
        header=MANIFEST_HEADER,
    )
    atomic_write(path / ".gitignore", DEFAULT_GITIGNORE)
    return path


class ProjectManifest(YamlRegistry):
    """已安装包注册表 (.tackle/tackle.yml)

    键为规范化后的包标识，值记录版本、安装位置与来源 URL。
    """

    section_key = "packages"
    header = MANIFEST_HEADER

    def __init__(self, root: Path) -> None:
        if not is_initialized(root):
            raise NotInitializedError(f"项目尚未初始化，请先执行 tackle init: {root}")
        self.root = root
        super().__init__(tackle_dir(root) / MANIFEST_FILE)

    @property
    def version(self) -> str:
        return str(self._data.get("version", MANIFEST_VERSION))

    def add(
        self, package: str, *,
        url: str, version: str = "", location: str = "project", integrity: str = "",
    ) -> dict[str, Any]:
        """记录一个已安装包（同名覆盖）"""
        self._data.setdefault("version", MANIFEST_VERSION)
        entry = self._put(package, {
            "url": url,
            "version": version,
            "location": location,
            "integrity": integrity,
        })
        logger.info("已记录包: %s (location=%s)", package, location)
        return entry

    def get(self, package: str) -> dict[str, Any] | None:
        return self._get_raw(package)

    def list_all(self) -> list[dict[str, Any]]:
        return self._list_raw()

    def remove(self, package: str) -> bool:
        if not self._remove(package):
            return False
        logger.info("已移除包记录: %s", package)
        return True
