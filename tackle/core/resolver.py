"""版本解析器

对每个配置的来源并发执行: 拼接候选 clone URL → clone 到临时目录 →
列出 tag → 查找与请求版本字符串完全相同的 tag。

选择规则与完成先后无关: 所有来源都结束后（全屏障，不提前取消），
按调用方给定的来源优先级取第一个命中者。单个来源失败只记日志，
全部未命中返回 None（不是错误）。
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from packaging.version import Version

from tackle.core.exceptions import TackleError
from tackle.core.models import Repository, ResolvedLocation, ResolvedPackage
from tackle.utils.git import GitClient

logger = logging.getLogger(__name__)


def resolve_from_repository(
    repo: Repository, name: str, version: Version, git: GitClient,
) -> ResolvedPackage | None:
    """在单个来源中查找版本，无匹配 tag 返回 None

    临时 clone 目录在任何退出路径上都会被清理。

    Raises:
        CloneFailedError: clone 或读取 tag 失败
    """
    url = repo.package_url(name)
    wanted = str(version)
    prefix = f"tackle-{name.replace('/', '-')}-{wanted}-"
    with tempfile.TemporaryDirectory(prefix=prefix) as tmp:
        clone_dir = Path(tmp) / "repo"
        git.clone(url, clone_dir, no_checkout=True)
        tags = git.tag_names(clone_dir)

    if wanted not in tags:
        logger.debug("来源 %s 无匹配版本 %s@%s (共 %d 个 tag)", repo.url, name, wanted, len(tags))
        return None

    logger.debug("来源 %s 命中 %s@%s", repo.url, name, wanted)
    return ResolvedPackage(
        location=ResolvedLocation.from_remote(url),
        name=name,
        version=version,
        source=repo,
        tag=wanted,
    )


class PackageResolver:
    """多来源并发版本解析器"""

    def __init__(
        self,
        repositories: list[Repository],
        git: GitClient | None = None,
        max_workers: int = 8,
    ) -> None:
        self.repositories = list(repositories)
        self.git = git or GitClient()
        self.max_workers = max(1, max_workers)

    def _attempt(self, repo: Repository, name: str, version: Version) -> ResolvedPackage | None:
        """单个来源的解析尝试，预期内的失败局部吸收"""
        try:
            return resolve_from_repository(repo, name, version, self.git)
        except (TackleError, OSError, subprocess.SubprocessError) as e:
            logger.warning("来源解析失败（已忽略）: %s - %s", repo.url, e)
            return None

    def resolve(self, name: str, version: Version) -> ResolvedPackage | None:
        """解析 name@version，返回优先级最高的命中来源，全部未命中返回 None

        工作线程中的非预期异常会在汇合时原样抛出（运行时不变量被破坏）。
        """
        if not self.repositories:
            logger.warning("未配置任何包来源，无法解析 %s@%s", name, version)
            return None

        logger.info("解析 %s@%s (%d 个来源)", name, version, len(self.repositories))
        workers = min(self.max_workers, len(self.repositories))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._attempt, repo, name, version)
                for repo in self.repositories
            ]
            # 按提交顺序（即来源优先级）汇合，而非按完成顺序
            results = [future.result() for future in futures]

        for repo, result in zip(self.repositories, results):
            if result is not None:
                logger.info("已解析 %s@%s -> %s", name, version, repo.url)
                return result

        logger.info("所有来源均未找到 %s@%s", name, version)
        return None


def resolve(
    name: str,
    version: Version,
    sources: list[Repository],
    git: GitClient | None = None,
) -> ResolvedPackage | None:
    """便捷入口: 用给定来源列表解析一次"""
    return PackageResolver(sources, git=git).resolve(name, version)
