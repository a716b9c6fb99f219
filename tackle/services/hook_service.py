"""hook 执行服务 — 按注册顺序为每个已安装包建立独立的 HookRunner 并执行"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tackle.core.conditions import HookRunner
from tackle.core.executor import HookExecutor
from tackle.core.models import HookResult, HookState
from tackle.core.project import RepositoryContext
from tackle.services.package_service import PackageService

logger = logging.getLogger(__name__)


@dataclass
class StageReport:
    """单个阶段的执行汇总"""

    stage: str
    results: dict[str, list[HookResult]] = field(default_factory=dict)

    def _count(self, status: str) -> int:
        return sum(1 for rs in self.results.values() for r in rs if r.status == status)

    @property
    def failed(self) -> int:
        return self._count(HookState.FAILED.value)

    @property
    def skipped(self) -> int:
        return self._count(HookState.SKIPPED.value)

    @property
    def successful(self) -> int:
        return self._count(HookState.SUCCESSFUL.value)

    @property
    def success(self) -> bool:
        return self.failed == 0


class HookService:
    """执行某个 git hook 阶段下的全部已安装 hooks"""

    def __init__(
        self,
        packages: PackageService,
        context: RepositoryContext,
        executor: HookExecutor,
    ) -> None:
        self.packages = packages
        self.context = context
        self.executor = executor

    def run_stage(self, stage: str) -> StageReport:
        report = StageReport(stage=stage)
        root = self.context.discover_project_root()
        for name, hooks in self.packages.load_installed(stage):
            if not hooks:
                continue
            logger.info(
                "[%s] %s: %d 个 hook", stage, name, len(hooks),
                extra={"stage": stage, "package": name},
            )
            runner = HookRunner.from_hooks(
                hooks,
                branch_provider=self.context.current_branch_name,
                workdir=root,
            )
            report.results[name] = self.executor.run(runner, package=name)

        logger.info(
            "[%s] 完成: %d 成功, %d 失败, %d 跳过",
            stage, report.successful, report.failed, report.skipped,
            extra={"stage": stage},
        )
        return report
