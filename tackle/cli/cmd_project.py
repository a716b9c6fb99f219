"""CLI — 项目初始化与已安装包列表"""

from __future__ import annotations

import click

from tackle.cli import _svc, handle_errors
from tackle.core.project import init_project


def register(group: click.Group) -> None:
    group.add_command(init)
    group.add_command(list_packages)


@click.command()
@handle_errors
def init() -> None:
    """在当前 git 仓库中初始化 .tackle 目录"""
    root = _svc().context.discover_project_root()
    path = init_project(root)
    click.echo(f"已初始化: {path}")


@click.command(name="list")
@handle_errors
def list_packages() -> None:
    """列出当前项目已安装的 hook 包"""
    packages = _svc().packages.list_installed()
    if not packages:
        click.echo("没有已安装的包。")
        return
    for p in packages:
        version = p.get("version") or "-"
        click.echo(f"  {p['name']:40s} {version:12s} [{p.get('location', '')}]")
