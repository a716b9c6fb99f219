"""tackle 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import functools
import os
from collections.abc import Callable
from typing import Any

import click

from tackle import __version__
from tackle.core.config import init_config
from tackle.core.exceptions import TackleError
from tackle.services.container import ServiceContainer, get_container, reset_container
from tackle.utils.logger import setup_logging


def _svc() -> ServiceContainer:
    """获取全局服务容器的快捷方式"""
    return get_container()


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """将 TackleError 转为带错误码的 ClickException（退出码 1）"""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TackleError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="输出调试日志")
@click.option("--config", "config_path", default=None, help="配置文件路径（默认 ~/.tackle/config.yml）")
def main(debug: bool, config_path: str | None) -> None:
    """tackle - 跨平台 git hook 包管理器"""
    try:
        cfg = init_config(config_path)
    except TackleError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e
    level = "DEBUG" if debug else os.getenv("TACKLE_LOG_LEVEL", cfg.log_level)
    setup_logging(
        level=level,
        json_output=os.getenv("TACKLE_LOG_JSON", "") == "1",
    )
    reset_container()


# 注册各领域子命令
from tackle.cli.cmd_project import register as _reg_project  # noqa: E402
from tackle.cli.cmd_package import register as _reg_package  # noqa: E402
from tackle.cli.cmd_hooks import register as _reg_hooks  # noqa: E402

_reg_project(main)
_reg_package(main)
_reg_hooks(main)
