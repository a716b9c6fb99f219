"""CLI — hook 执行命令"""

from __future__ import annotations

import click

from tackle.cli import _svc, handle_errors
from tackle.core.models import HOOK_STAGES, HookState


def register(group: click.Group) -> None:
    group.add_command(run)


@click.command()
@click.argument("stage", type=click.Choice(HOOK_STAGES))
@handle_errors
def run(stage: str) -> None:
    """执行指定阶段的全部 hooks，有失败时以非零码退出"""
    report = _svc().hooks.run_stage(stage)
    for package, results in report.results.items():
        click.echo(f"{package}:")
        for r in results:
            click.echo(f"  [{r.status:10s}] {r.name} ({r.duration:.2f}s)")
            if r.status == HookState.FAILED.value and r.message:
                click.echo(f"      {r.message}")
    click.echo(
        f"成功 {report.successful}, 失败 {report.failed}, 跳过 {report.skipped}"
    )
    if not report.success:
        raise SystemExit(1)
