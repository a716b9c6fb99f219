"""子进程执行工具

hook 命令通过 CommandExecutor 协议执行，方便测试替换；
PATH 可执行文件检查供 hook 的 OS 依赖判定使用。
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 接受 argv 列表，返回退出码与输出"""

    def execute(
        self,
        argv: list[str],
        *,
        cwd: str = ".",
        timeout: float | None = None,
    ) -> CommandResult:
        ...


class LocalExecutor:
    """本地子进程执行器（默认实现）

    hook 命令按 argv 直接执行，不经过 shell。
    超时或可执行文件不存在时以非零退出码返回，而不是抛出。
    """

    def execute(
        self,
        argv: list[str],
        *,
        cwd: str = ".",
        timeout: float | None = None,
    ) -> CommandResult:
        try:
            r = subprocess.run(
                argv, capture_output=True, text=True,
                cwd=cwd, check=False, timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(returncode=124, stderr=f"超时（{timeout}秒）")
        except FileNotFoundError as e:
            return CommandResult(returncode=127, stderr=str(e))
        return CommandResult(returncode=r.returncode, stdout=r.stdout, stderr=r.stderr)


def is_executable_available(name: str) -> bool:
    """检查可执行文件是否在 PATH 中"""
    found = shutil.which(name) is not None
    if not found:
        logger.debug("PATH 中未找到可执行文件: %s", name)
    return found
