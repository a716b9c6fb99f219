"""hook 顺序执行器

逐个从 HookRunner 取出可运行的 hook 执行，并按退出码回写
Successful / Failed；后续 hook 的可运行性依赖前序结果，因此严格串行。
调度停滞后剩余 Pending hook 记为 Skipped。
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from tackle.core.conditions import HookRunner
from tackle.core.models import HookDefinition, HookResult, HookState
from tackle.utils.shell import CommandExecutor, LocalExecutor

logger = logging.getLogger(__name__)

# 失败输出截断长度
_MAX_MESSAGE = 500


class HookExecutor:
    """通过 CommandExecutor 执行 hook 命令"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> None:
        self.executor = executor or LocalExecutor()
        self.cwd = cwd or Path.cwd()
        self.timeout = timeout

    def _execute(self, hook: HookDefinition, context: dict[str, str]) -> HookResult:
        start = time.monotonic()
        logger.info(
            "执行 hook: %s -> %s", hook.display_name, " ".join(hook.command),
            extra={**context, "hook": hook.display_name},
        )
        r = self.executor.execute(hook.command, cwd=str(self.cwd), timeout=self.timeout)
        duration = time.monotonic() - start
        if r.success:
            return HookResult(
                name=hook.display_name, status=HookState.SUCCESSFUL.value,
                duration=duration, message="通过",
            )
        output = (r.stderr or r.stdout).strip()[:_MAX_MESSAGE]
        return HookResult(
            name=hook.display_name, status=HookState.FAILED.value,
            duration=duration, message=f"退出码: {r.returncode}\n{output}".rstrip(),
        )

    def run(self, runner: HookRunner, *, package: str | None = None) -> list[HookResult]:
        """执行至无 hook 可运行，返回按执行顺序排列的结果（跳过的在最后）

        package 只用于日志上下文。
        """
        context = {"package": package} if package else {}
        results: list[HookResult] = []
        while True:
            entry = runner.next_entry()
            if entry is None:
                break
            result = self._execute(entry.hook, context)
            runner.set_state_at(entry.index, HookState(result.status))
            logger.info(
                "完成: %s -> %s (%.1f秒)", result.name, result.status, result.duration,
                extra={
                    **context, "hook": result.name,
                    "status": result.status, "duration": round(result.duration, 3),
                },
            )
            results.append(result)

        for entry in runner.skip_blocked():
            results.append(HookResult(
                name=entry.hook.display_name,
                status=HookState.SKIPPED.value,
                message="条件未满足或缺少依赖",
            ))
        return results
