"""服务容器 — 统一构造并共享 git 客户端、缓存、解析器与各服务

同一容器内的实例懒加载并共享；CLI 通过容器获取服务，测试可注入
Config、工作目录与 GitClient。

用法:
    container = ServiceContainer(config=cfg, cwd=Path("/path/to/repo"))
    container.packages.install("skyezerfox/hooks")
    container.hooks.run_stage("precommit")
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from tackle.core.models import Repository

if TYPE_CHECKING:
    from tackle.core.cache import PackageCache
    from tackle.core.config import Config
    from tackle.core.project import RepositoryContext
    from tackle.core.resolver import PackageResolver
    from tackle.services.hook_service import HookService
    from tackle.services.package_service import PackageService
    from tackle.utils.git import GitClient

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(
        self,
        config: Config | None = None,
        cwd: Path | None = None,
        git: GitClient | None = None,
        cache: PackageCache | None = None,
    ) -> None:
        if config is None:
            from tackle.core.config import get_config
            config = get_config()
        self._config = config
        self._cwd = cwd or Path.cwd()
        self._instances: dict[str, object] = {}
        if git is not None:
            self._instances["git"] = git
        if cache is not None:
            self._instances["cache"] = cache

    @property
    def config(self) -> Config:
        return self._config

    @property
    def git(self) -> GitClient:
        if "git" not in self._instances:
            from tackle.utils.git import GitClient
            self._instances["git"] = GitClient(timeout=self._config.git_timeout)
        return self._instances["git"]  # type: ignore[return-value]

    @property
    def context(self) -> RepositoryContext:
        if "context" not in self._instances:
            from tackle.core.project import RepositoryContext
            self._instances["context"] = RepositoryContext(cwd=self._cwd, git=self.git)
        return self._instances["context"]  # type: ignore[return-value]

    @property
    def cache(self) -> PackageCache:
        if "cache" not in self._instances:
            from tackle.core.cache import PackageCache
            self._instances["cache"] = PackageCache()
        return self._instances["cache"]  # type: ignore[return-value]

    @property
    def resolver(self) -> PackageResolver:
        if "resolver" not in self._instances:
            from tackle.core.resolver import PackageResolver
            self._instances["resolver"] = PackageResolver(
                [Repository(url) for url in self._config.repositories],
                git=self.git,
                max_workers=self._config.max_workers,
            )
        return self._instances["resolver"]  # type: ignore[return-value]

    @property
    def packages(self) -> PackageService:
        if "packages" not in self._instances:
            from tackle.services.package_service import PackageService
            self._instances["packages"] = PackageService(
                self.context.discover_project_root(),
                cache=self.cache,
                resolver=self.resolver,
                git=self.git,
            )
        return self._instances["packages"]  # type: ignore[return-value]

    @property
    def hooks(self) -> HookService:
        if "hooks" not in self._instances:
            from tackle.core.executor import HookExecutor
            from tackle.services.hook_service import HookService
            self._instances["hooks"] = HookService(
                self.packages,
                self.context,
                HookExecutor(
                    cwd=self.context.discover_project_root(),
                    timeout=self._config.hook_timeout,
                ),
            )
        return self._instances["hooks"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例（线程安全）"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
