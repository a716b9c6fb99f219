"""hook 条件调度器

HookRunner 持有一次执行中全部 hook 的状态（唯一写入方），按清单声明顺序
选出下一个可运行的 hook:

  - 非 Pending 的 hook 不再考虑
  - OS 依赖（可执行文件）不在 PATH 中则不可运行
  - conditions 中任一子句满足即可运行（子句间 OR）
  - 子句内 successful / failed / skipped / exists / branch 全部满足（AND），
    空字段视为满足；因此全空子句表示"总是运行"

注意: branch 字段同样是 AND 语义，列出多个分支名的子句除非这些名字
完全相同，否则永远不会满足。每个子句应只写一个分支。

条件之间的依赖不做静态环检测；环或不可达条件在运行时表现为
next_hook() 返回 None 而仍有 Pending hook，可用 is_blocked() 判定。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from tackle.core.exceptions import HookStateError, UnknownHookIdError
from tackle.core.models import HookCondition, HookDefinition, HookState, HookWithState
from tackle.utils.shell import is_executable_available

logger = logging.getLogger(__name__)

BranchProvider = Callable[[], str]
ExecutableLookup = Callable[[str], bool]


def _current_branch() -> str:
    from tackle.core.project import RepositoryContext
    return RepositoryContext().current_branch_name()


class HookRunner:
    """单次执行的 hook 状态机与调度器（单线程使用）"""

    def __init__(
        self,
        hooks: list[HookWithState],
        *,
        branch_provider: BranchProvider | None = None,
        executable_lookup: ExecutableLookup | None = None,
        workdir: Path | None = None,
    ) -> None:
        self.hooks = hooks
        self._by_id = {h.hook.id: h for h in hooks if h.hook.id is not None}
        self._branch_provider = branch_provider or _current_branch
        self._executable_lookup = executable_lookup or is_executable_available
        self.workdir = workdir

    @classmethod
    def from_hooks(cls, definitions: Iterable[HookDefinition], **kwargs: Any) -> HookRunner:
        """所有 hook 初始化为 Pending，保持清单顺序"""
        return cls(
            [HookWithState(index=i, hook=h) for i, h in enumerate(definitions)],
            **kwargs,
        )

    # ------------------------------------------------------------------
    # 状态
    # ------------------------------------------------------------------

    def state_of(self, hook_id: str) -> HookState:
        entry = self._by_id.get(hook_id)
        if entry is None:
            raise UnknownHookIdError(f"hook 不存在: {hook_id}")
        return entry.state

    def set_hook_state(self, hook_id: str, state: HookState) -> None:
        """按 id 设置 hook 终态

        Raises:
            UnknownHookIdError: id 不存在
            HookStateError: 非 Pending → 终态的迁移
        """
        entry = self._by_id.get(hook_id)
        if entry is None:
            raise UnknownHookIdError(f"hook 不存在: {hook_id}")
        self._transition(entry, state)

    def set_state_at(self, index: int, state: HookState) -> None:
        """按清单位置设置 hook 终态（无 id 的 hook 使用）"""
        self._transition(self.hooks[index], state)

    @staticmethod
    def _transition(entry: HookWithState, state: HookState) -> None:
        if entry.state is not HookState.PENDING:
            raise HookStateError(
                f"hook '{entry.hook.display_name}' 已处于终态 {entry.state.value}，"
                f"不能再设置为 {state.value}"
            )
        if state is HookState.PENDING:
            raise HookStateError(f"hook '{entry.hook.display_name}' 不能设置回 pending")
        entry.state = state
        logger.debug("hook 状态: %s -> %s", entry.hook.display_name, state.value)

    # ------------------------------------------------------------------
    # 条件判定
    # ------------------------------------------------------------------

    def _all_in_state(self, hook_ids: list[str], state: HookState) -> bool:
        # 未知 id 视为不满足
        return all(
            hook_id in self._by_id and self._by_id[hook_id].state is state
            for hook_id in hook_ids
        )

    def _path_exists(self, path: str) -> bool:
        p = Path(path)
        if self.workdir is not None and not p.is_absolute():
            p = self.workdir / p
        return p.exists()

    def condition_satisfied(self, condition: HookCondition) -> bool:
        """单个子句: 五个字段全部满足"""
        return (
            self._all_in_state(condition.successful, HookState.SUCCESSFUL)
            and self._all_in_state(condition.failed, HookState.FAILED)
            and self._all_in_state(condition.skipped, HookState.SKIPPED)
            and all(self._path_exists(p) for p in condition.exists)
            and self._branch_matches(condition.branch)
        )

    def _branch_matches(self, names: list[str]) -> bool:
        if not names:
            return True
        # 分支名仅在子句用到时才读取
        current = self._branch_provider()
        return all(name == current for name in names)

    def is_eligible(self, entry: HookWithState) -> bool:
        if entry.state is not HookState.PENDING:
            return False
        missing = [d for d in entry.hook.dependencies if not self._executable_lookup(d)]
        if missing:
            logger.debug("hook '%s' 缺少依赖: %s", entry.hook.display_name, ", ".join(missing))
            return False
        return any(self.condition_satisfied(c) for c in entry.hook.conditions)

    # ------------------------------------------------------------------
    # 调度
    # ------------------------------------------------------------------

    def next_entry(self) -> HookWithState | None:
        """按声明顺序返回第一个可运行的条目"""
        for entry in self.hooks:
            if self.is_eligible(entry):
                return entry
        return None

    def next_hook(self) -> HookDefinition | None:
        """按声明顺序返回第一个可运行的 hook，没有则返回 None"""
        entry = self.next_entry()
        return entry.hook if entry is not None else None

    def pending_hooks(self) -> list[HookDefinition]:
        return [h.hook for h in self.hooks if h.state is HookState.PENDING]

    def is_blocked(self) -> bool:
        """仍有 Pending hook 但没有任何 hook 可运行（条件不可达或成环）"""
        return bool(self.pending_hooks()) and self.next_entry() is None

    def skip_blocked(self) -> list[HookWithState]:
        """调度无法继续时，将剩余 Pending hook 标记为 Skipped 并返回它们"""
        if self.next_entry() is not None:
            return []
        blocked = [h for h in self.hooks if h.state is HookState.PENDING]
        if blocked:
            logger.warning(
                "%d 个 hook 条件无法满足（可能存在依赖环或不可达条件），已跳过: %s",
                len(blocked), ", ".join(h.hook.display_name for h in blocked),
            )
        for entry in blocked:
            entry.state = HookState.SKIPPED
        return blocked

    def summary(self) -> dict[str, int]:
        counts = {s.value: 0 for s in HookState}
        for h in self.hooks:
            counts[h.state.value] += 1
        return counts
