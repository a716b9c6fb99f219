"""hook 条件调度器测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from tackle.core.conditions import HookRunner
from tackle.core.exceptions import HookStateError, UnknownHookIdError
from tackle.core.models import HookCondition, HookDefinition, HookState


def _hook(hook_id: str | None, *conditions: HookCondition, deps: list[str] | None = None) -> HookDefinition:
    return HookDefinition(
        command=["echo", hook_id or "anon"],
        id=hook_id,
        dependencies=deps or [],
        conditions=list(conditions),
    )


def _runner(*hooks: HookDefinition, branch: str = "main", on_path: bool = True, **kwargs) -> HookRunner:
    return HookRunner.from_hooks(
        hooks,
        branch_provider=lambda: branch,
        executable_lookup=lambda name: on_path,
        **kwargs,
    )


ALWAYS = HookCondition()


class TestScheduling:
    def test_success_failure_chain(self) -> None:
        """A 总是运行；B 在 A 成功后运行；C 在 B 失败后运行"""
        runner = _runner(
            _hook("A", ALWAYS),
            _hook("B", HookCondition(successful=["A"])),
            _hook("C", HookCondition(failed=["B"])),
        )
        assert runner.next_hook().id == "A"
        runner.set_hook_state("A", HookState.SUCCESSFUL)
        assert runner.next_hook().id == "B"
        runner.set_hook_state("B", HookState.FAILED)
        assert runner.next_hook().id == "C"
        runner.set_hook_state("C", HookState.SUCCESSFUL)
        assert runner.next_hook() is None
        assert not runner.is_blocked()

    def test_both_predecessors_must_hold(self) -> None:
        """C 要求 A 成功且 B 失败；B 成功后 C 永远不可运行"""
        runner = _runner(
            _hook("A", ALWAYS),
            _hook("B", HookCondition(successful=["A"])),
            _hook("C", HookCondition(successful=["A"], failed=["B"])),
        )
        order: list[str | None] = []
        for _ in range(3):
            hook = runner.next_hook()
            order.append(hook.id if hook else None)
            if hook is not None:
                runner.set_hook_state(hook.id, HookState.SUCCESSFUL)

        assert order == ["A", "B", None]
        assert runner.state_of("C") is HookState.PENDING
        assert runner.is_blocked()

    def test_declaration_order(self) -> None:
        runner = _runner(_hook("X", ALWAYS), _hook("Y", ALWAYS))
        assert runner.next_hook().id == "X"

    def test_never_returns_non_pending(self) -> None:
        runner = _runner(_hook("A", ALWAYS))
        runner.set_hook_state("A", HookState.SKIPPED)
        assert runner.next_hook() is None

    def test_conditions_are_or(self) -> None:
        runner = _runner(
            _hook("A", ALWAYS),
            _hook("B", HookCondition(failed=["A"]), HookCondition(successful=["A"])),
        )
        runner.set_hook_state("A", HookState.SUCCESSFUL)
        assert runner.next_hook().id == "B"

    def test_fields_are_and(self) -> None:
        runner = _runner(
            _hook("A", ALWAYS),
            _hook("B", HookCondition(successful=["A"], branch=["release"])),
        )
        runner.set_hook_state("A", HookState.SUCCESSFUL)
        assert runner.next_hook() is None

    def test_empty_conditions_never_eligible(self) -> None:
        runner = _runner(_hook("A"))
        assert runner.next_hook() is None
        assert runner.is_blocked()

    def test_skipped_condition(self) -> None:
        runner = _runner(_hook("A", ALWAYS), _hook("B", HookCondition(skipped=["A"])))
        runner.set_hook_state("A", HookState.SKIPPED)
        assert runner.next_hook().id == "B"

    def test_unknown_id_in_condition_not_satisfied(self) -> None:
        runner = _runner(_hook("A", HookCondition(successful=["ghost"])))
        assert runner.next_hook() is None


class TestBranchAndExists:
    def test_branch_match(self) -> None:
        runner = _runner(_hook("A", HookCondition(branch=["main"])), branch="main")
        assert runner.next_hook().id == "A"

    def test_branch_mismatch(self) -> None:
        runner = _runner(_hook("A", HookCondition(branch=["main"])), branch="dev")
        assert runner.next_hook() is None

    def test_multiple_branch_names_are_and(self) -> None:
        """列出多个不同分支名的子句永远不满足"""
        runner = _runner(_hook("A", HookCondition(branch=["main", "dev"])), branch="main")
        assert runner.next_hook() is None

    def test_branch_per_clause_for_or(self) -> None:
        runner = _runner(
            _hook("A", HookCondition(branch=["main"]), HookCondition(branch=["dev"])),
            branch="dev",
        )
        assert runner.next_hook().id == "A"

    def test_branch_read_lazily(self) -> None:
        calls: list[int] = []

        def provider() -> str:
            calls.append(1)
            return "main"

        runner = HookRunner.from_hooks(
            [_hook("A", ALWAYS)], branch_provider=provider, executable_lookup=lambda n: True,
        )
        runner.next_hook()
        assert calls == []

    def test_exists_relative_to_workdir(self, tmp_path: Path) -> None:
        (tmp_path / "setup.cfg").write_text("")
        runner = _runner(_hook("A", HookCondition(exists=["setup.cfg"])), workdir=tmp_path)
        assert runner.next_hook().id == "A"

    def test_exists_missing(self, tmp_path: Path) -> None:
        runner = _runner(_hook("A", HookCondition(exists=["nope.cfg"])), workdir=tmp_path)
        assert runner.next_hook() is None


class TestDependencies:
    def test_missing_executable_blocks(self) -> None:
        runner = _runner(_hook("A", ALWAYS, deps=["ruff"]), on_path=False)
        assert runner.next_hook() is None

    def test_only_listed_executables_checked(self) -> None:
        runner = HookRunner.from_hooks(
            [_hook("A", ALWAYS, deps=["ruff"]), _hook("B", ALWAYS, deps=["black"])],
            branch_provider=lambda: "main",
            executable_lookup=lambda name: name == "black",
        )
        assert runner.next_hook().id == "B"


class TestStateTransitions:
    def test_unknown_id_raises(self) -> None:
        runner = _runner(_hook("A", ALWAYS))
        with pytest.raises(UnknownHookIdError):
            runner.set_hook_state("missing", HookState.SUCCESSFUL)
        with pytest.raises(UnknownHookIdError):
            runner.state_of("missing")

    def test_terminal_state_is_final(self) -> None:
        runner = _runner(_hook("A", ALWAYS))
        runner.set_hook_state("A", HookState.FAILED)
        with pytest.raises(HookStateError):
            runner.set_hook_state("A", HookState.SUCCESSFUL)
        assert runner.state_of("A") is HookState.FAILED

    def test_cannot_set_pending(self) -> None:
        runner = _runner(_hook("A", ALWAYS))
        with pytest.raises(HookStateError):
            runner.set_hook_state("A", HookState.PENDING)

    def test_anonymous_hook_by_index(self) -> None:
        runner = _runner(_hook(None, ALWAYS), _hook("B", HookCondition(successful=["A"])))
        entry = runner.next_entry()
        assert entry.index == 0
        runner.set_state_at(entry.index, HookState.SUCCESSFUL)
        assert runner.next_hook() is None


class TestBlocked:
    def test_cycle_is_blocked(self) -> None:
        runner = _runner(
            _hook("A", HookCondition(successful=["B"])),
            _hook("B", HookCondition(successful=["A"])),
        )
        assert runner.next_hook() is None
        assert runner.is_blocked()
        assert [h.id for h in runner.pending_hooks()] == ["A", "B"]

    def test_skip_blocked_marks_remaining(self) -> None:
        runner = _runner(
            _hook("A", ALWAYS),
            _hook("B", HookCondition(failed=["A"])),
        )
        runner.set_hook_state("A", HookState.SUCCESSFUL)
        skipped = runner.skip_blocked()
        assert [e.hook.id for e in skipped] == ["B"]
        assert runner.state_of("B") is HookState.SKIPPED
        assert runner.summary() == {"pending": 0, "successful": 1, "failed": 0, "skipped": 1}

    def test_skip_blocked_noop_while_runnable(self) -> None:
        runner = _runner(_hook("A", ALWAYS))
        assert runner.skip_blocked() == []
        assert runner.state_of("A") is HookState.PENDING
