"""核心数据模型

包标识、解析结果、包清单与 hook 定义集中定义于此，
identifier / cache / resolver / fetcher / conditions 统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from urllib.parse import urljoin

from packaging.version import Version

# =========================================================================
# 包标识
# =========================================================================


@dataclass(frozen=True)
class CanonicalId:
    """规范化后的包标识: host/owner/repo + 仓库内子路径"""

    repo_id: str
    subpath: str = "."

    @property
    def host(self) -> str:
        return self.repo_id.split("/")[0]

    @property
    def owner(self) -> str:
        return self.repo_id.split("/")[1]

    @property
    def repo(self) -> str:
        return self.repo_id.split("/")[2]

    @property
    def clone_url(self) -> str:
        return f"https://{self.repo_id}.git"

    def __str__(self) -> str:
        if self.subpath == ".":
            return self.repo_id
        return f"{self.repo_id}/{self.subpath}"


# =========================================================================
# 版本解析
# =========================================================================


@dataclass(frozen=True)
class Repository:
    """托管可安装包的来源（基础 URL）"""

    url: str

    def package_url(self, name: str) -> str:
        """将包名拼接到来源 URL 上，得到候选 clone 地址"""
        base = self.url if self.url.endswith("/") else self.url + "/"
        return urljoin(base, name)


@dataclass(frozen=True)
class ResolvedLocation:
    """解析结果位置: 远程 clone URL 与缓存路径二选一"""

    remote: str = ""
    cached: Path | None = None

    def __post_init__(self) -> None:
        if bool(self.remote) == (self.cached is not None):
            raise ValueError("ResolvedLocation 必须且只能指定 remote 或 cached 之一")

    @classmethod
    def from_remote(cls, url: str) -> ResolvedLocation:
        return cls(remote=url)

    @classmethod
    def from_cache(cls, path: Path) -> ResolvedLocation:
        return cls(cached=path)

    @property
    def is_remote(self) -> bool:
        return bool(self.remote)

    @property
    def is_cached(self) -> bool:
        return self.cached is not None


@dataclass
class ResolvedPackage:
    """版本解析命中的包"""

    location: ResolvedLocation
    name: str
    version: Version
    source: Repository | None = None
    tag: str = ""


# =========================================================================
# 包清单 (package.toml)
# =========================================================================


@dataclass
class HookCondition:
    """单个条件子句，五个字段之间为 AND 关系，空字段视为满足"""

    successful: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    exists: list[str] = field(default_factory=list)
    branch: list[str] = field(default_factory=list)

    @property
    def is_unconditional(self) -> bool:
        return not (
            self.successful or self.failed or self.skipped
            or self.exists or self.branch
        )


@dataclass
class HookDefinition:
    """包内的单个 hook 定义"""

    command: list[str]
    id: str | None = None
    dependencies: list[str] = field(default_factory=list)
    conditions: list[HookCondition] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.id or " ".join(self.command)


HOOK_STAGES = ("precommit", "postcommit")


@dataclass
class HookDefinitions:
    """按 git hook 阶段分组的 hook 定义，列表顺序即调度优先级"""

    precommit: list[HookDefinition] = field(default_factory=list)
    postcommit: list[HookDefinition] = field(default_factory=list)

    def for_stage(self, stage: str) -> list[HookDefinition]:
        if stage not in HOOK_STAGES:
            raise ValueError(f"不支持的 hook 阶段: {stage}，可用: {list(HOOK_STAGES)}")
        hooks: list[HookDefinition] = getattr(self, stage)
        return hooks


@dataclass
class Package:
    """package.toml 描述的 hook 包"""

    hooks: HookDefinitions
    name: str | None = None
    description: str | None = None
    version: str | None = None


# =========================================================================
# 调度状态
# =========================================================================


class HookState(str, Enum):
    """hook 状态: Pending 仅能迁移一次到三个终态之一"""

    PENDING = "pending"
    SUCCESSFUL = "successful"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self is not HookState.PENDING


@dataclass
class HookWithState:
    """调度器内部条目: hook 定义 + 当前状态 + 清单中的位置"""

    index: int
    hook: HookDefinition
    state: HookState = HookState.PENDING


@dataclass
class HookResult:
    """单个 hook 的执行结果"""

    name: str
    status: str  # successful / failed / skipped
    duration: float = 0.0
    message: str = ""
