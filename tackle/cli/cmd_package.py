"""CLI — 包安装、版本解析与缓存管理命令"""

from __future__ import annotations

import click
from packaging.version import InvalidVersion, Version

from tackle.cli import _svc, handle_errors
from tackle.core.identifier import canonicalize


def register(group: click.Group) -> None:
    group.add_command(add)
    group.add_command(remove)
    group.add_command(resolve)
    group.add_command(cache)


def _parse_version(value: str | None) -> Version | None:
    if value is None:
        return None
    try:
        return Version(value)
    except InvalidVersion as e:
        raise click.BadParameter(f"非法版本号: {value}") from e


@click.command()
@click.argument("package")
@click.option("--version", "version", default=None, help="指定版本（需配置 repositories）")
@handle_errors
def add(package: str, version: str | None) -> None:
    """安装 hook 包并记录到 .tackle/tackle.yml"""
    result = _svc().packages.install(package, _parse_version(version))
    label = result.package.name or str(result.cid)
    if result.cached:
        click.echo(f"已安装（缓存）: {label} -> {result.location.cached}")
    else:
        click.echo(f"已安装: {label} -> {result.location.cached}")


@click.command()
@click.argument("package")
@handle_errors
def remove(package: str) -> None:
    """移除已安装的 hook 包"""
    if _svc().packages.remove(package):
        click.echo(f"已移除: {package}")
    else:
        click.echo(f"未安装: {package}")


@click.command()
@click.argument("name")
@click.argument("version")
@handle_errors
def resolve(name: str, version: str) -> None:
    """在配置的来源中解析 NAME@VERSION（不下载到缓存）"""
    svc = _svc()
    ver = _parse_version(version)
    if not svc.config.repositories:
        click.echo("未配置 repositories，无法解析版本。")
        raise SystemExit(1)
    resolved = svc.resolver.resolve(name, ver)
    if resolved is None:
        click.echo(f"未找到: {name}@{version}")
        raise SystemExit(1)
    click.echo(f"{resolved.name}@{resolved.version} -> {resolved.location.remote} (tag {resolved.tag})")


# =========================================================================
# 缓存管理
# =========================================================================


@click.group()
def cache() -> None:
    """用户级包缓存管理（~/.tackle）"""


@cache.command(name="path")
@handle_errors
def cache_path() -> None:
    """显示缓存根目录"""
    click.echo(str(_svc().cache.root))


@cache.command(name="list")
@handle_errors
def cache_list() -> None:
    """列出已缓存的仓库"""
    repos = _svc().cache.list_repositories()
    if not repos:
        click.echo("缓存为空。")
        return
    for repo_id in repos:
        click.echo(f"  {repo_id}")


@cache.command(name="remove")
@click.argument("package")
@handle_errors
def cache_remove(package: str) -> None:
    """删除缓存中的仓库"""
    cid = canonicalize(package)
    if _svc().cache.remove(cid):
        click.echo(f"已删除缓存: {cid.repo_id}")
    else:
        click.echo(f"缓存中不存在: {cid.repo_id}")
