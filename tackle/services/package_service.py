"""包安装服务

install 流程:
  规范化 → 缓存查找（命中时校验指定版本）→ 指定版本时在配置的来源中并发解析，
  命中后按 tag clone 进缓存 → 未指定版本时直接拉取到项目 .tackle/hooks
  → 以规范化标识为键记录到 tackle.yml
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from packaging.version import Version

from tackle.core.cache import PackageCache
from tackle.core.exceptions import ManifestNotFoundError, PackageNotFoundError
from tackle.core.fetcher import PackageFetcher
from tackle.core.identifier import canonicalize
from tackle.core.manifest import load_package
from tackle.core.models import (
    CanonicalId,
    HookDefinition,
    Package,
    ResolvedLocation,
)
from tackle.core.project import ProjectManifest
from tackle.core.resolver import PackageResolver
from tackle.utils.git import GitClient

logger = logging.getLogger(__name__)

LOCATION_PROJECT = "project"
LOCATION_CACHE = "cache"


@dataclass
class InstallResult:
    """安装结果"""

    package: Package
    cid: CanonicalId
    location: ResolvedLocation
    cached: bool = False  # 是否命中已有缓存


class PackageService:
    """安装、列出、移除项目中的 hook 包"""

    def __init__(
        self,
        project_root: Path,
        *,
        cache: PackageCache,
        resolver: PackageResolver,
        git: GitClient,
    ) -> None:
        self.project_root = project_root
        self.cache = cache
        self.resolver = resolver
        self.fetcher = PackageFetcher(project_root, git=git)
        self._git = git

    def _manifest(self) -> ProjectManifest:
        return ProjectManifest(self.project_root)

    def install(self, raw: str, version: Version | None = None) -> InstallResult:
        """安装包并记录到项目注册表

        注册表以规范化标识为键，同一包的不同写法只登记一次。
        记录的版本始终取自实际安装的清单。

        Raises:
            NotInitializedError: 项目未初始化
            PackageNotFoundError: 指定版本在所有来源中都不存在、未配置来源，
                或缓存中的版本与指定版本不一致
            以及 fetch / 清单加载的各类 TackleError
        """
        manifest = self._manifest()
        cid = canonicalize(raw)
        key = str(cid)

        package = self.cache.lookup_package(raw)
        if package is not None:
            if version is not None and package.version != str(version):
                raise PackageNotFoundError(
                    f"缓存中的 {key} 版本为 {package.version or '未知'}，"
                    f"与指定的 {version} 不一致，请先执行 tackle cache remove {key}"
                )
            path = self.cache.repository_path(cid)
            logger.info("使用缓存: %s -> %s", cid, path)
            manifest.add(key, url=cid.clone_url, version=package.version or "",
                         location=LOCATION_CACHE)
            return InstallResult(package, cid, ResolvedLocation.from_cache(path), cached=True)

        if version is not None:
            if not self.resolver.repositories:
                raise PackageNotFoundError(
                    f"未配置 repositories，无法安装指定版本 {key}@{version}"
                )
            name = f"{cid.owner}/{cid.repo}"
            resolved = self.resolver.resolve(name, version)
            if resolved is None:
                raise PackageNotFoundError(f"所有来源都没有 {name}@{version}")
            path = self.cache.store(cid, resolved.location.remote, self._git, ref=resolved.tag)
            package = load_package(path / cid.subpath)
            manifest.add(key, url=resolved.location.remote, version=package.version or resolved.tag,
                         location=LOCATION_CACHE)
            return InstallResult(package, cid, ResolvedLocation.from_cache(path))

        target = self.fetcher.target_path(cid)
        if target.exists() and self._shares_checkout(manifest, key, cid):
            # 同一仓库的另一个子路径包已拉取，复用该 checkout
            logger.info("复用已拉取仓库: %s", target)
            package = load_package(target / cid.subpath)
        else:
            package = self.fetcher.fetch(raw)
        manifest.add(key, url=cid.clone_url, version=package.version or "",
                     location=LOCATION_PROJECT)
        return InstallResult(package, cid, ResolvedLocation.from_cache(target))

    @staticmethod
    def _shares_checkout(manifest: ProjectManifest, key: str, cid: CanonicalId) -> bool:
        """是否有其他已记录的项目内包使用同一仓库目录"""
        return any(
            other["name"] != key
            and other.get("location", LOCATION_PROJECT) == LOCATION_PROJECT
            and canonicalize(other["name"]).repo_id == cid.repo_id
            for other in manifest.list_all()
        )

    def list_installed(self) -> list[dict[str, Any]]:
        return self._manifest().list_all()

    def package_dir(self, raw: str, location: str) -> Path:
        """已安装包的清单所在目录"""
        cid = canonicalize(raw)
        if location == LOCATION_CACHE:
            return self.cache.repository_path(cid) / cid.subpath
        return self.fetcher.target_path(cid) / cid.subpath

    def load_installed(self, stage: str) -> list[tuple[str, list[HookDefinition]]]:
        """按注册顺序加载各已安装包在指定阶段的 hooks，包名为规范化标识

        Raises:
            ManifestNotFoundError: 已注册但本地目录缺失
        """
        loaded: list[tuple[str, list[HookDefinition]]] = []
        for entry in self._manifest().list_all():
            key = str(canonicalize(entry["name"]))
            pkg_dir = self.package_dir(key, entry.get("location", LOCATION_PROJECT))
            if not pkg_dir.exists():
                raise ManifestNotFoundError(
                    f"已安装的包 '{key}' 在本地不存在: {pkg_dir}，请重新安装"
                )
            package = load_package(pkg_dir)
            loaded.append((key, package.hooks.for_stage(stage)))
        return loaded

    def remove(self, raw: str) -> bool:
        """移除包记录；项目内拉取的目录一并删除（缓存保留）

        任意写法都按规范化标识查找。同一仓库的其他子路径包仍在使用时不删除目录。
        """
        manifest = self._manifest()
        cid = canonicalize(raw)
        key = str(cid)
        entry = manifest.get(key)
        if entry is None:
            return False
        if (entry.get("location", LOCATION_PROJECT) == LOCATION_PROJECT
                and not self._shares_checkout(manifest, key, cid)):
            target = self.fetcher.target_path(cid)
            if target.exists():
                shutil.rmtree(target)
                logger.info("已删除: %s", target)
        return manifest.remove(key)
