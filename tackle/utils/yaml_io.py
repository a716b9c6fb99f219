"""YAML 文件读写工具

用户配置（~/.tackle/config.yml）与项目注册表（.tackle/tackle.yml）
统一经由此处读写: UTF-8、大小上限、原子写入。
tackle 生成的文件可带注释头，提示用户通过命令而非手工修改。
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 配置文件大小上限 (1MB)
MAX_YAML_SIZE = 1024 * 1024


def atomic_write(path: Path, content: str) -> None:
    """先写同目录临时文件再 os.replace，中途失败不会留下半截文件"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, str(path))
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML 映射文件，文件不存在、为空或顶层不是映射时返回空字典

    Raises:
        yaml.YAMLError: YAML 语法错误
        ValueError: 文件超过 MAX_YAML_SIZE
    """
    p = Path(path)
    if not p.is_file():
        return {}
    size = p.stat().st_size
    if size > MAX_YAML_SIZE:
        raise ValueError(f"YAML 文件过大: {p} ({size} 字节)，上限 {MAX_YAML_SIZE} 字节")

    try:
        result = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", p, e)
        raise

    if result is None:
        return {}
    if not isinstance(result, dict):
        logger.warning("%s 顶层不是映射 (实际类型: %s)，按空处理", p, type(result).__name__)
        return {}
    return result


def dump_yaml(data: Any, header: str = "") -> str:
    """序列化为块风格 YAML，保持键顺序；header 每行加 "# " 置于文件开头"""
    body = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    if not header:
        return body
    comment = "".join(f"# {line}\n" if line else "#\n" for line in header.splitlines())
    return comment + body


def save_yaml(path: str | Path, data: Any, header: str = "") -> None:
    atomic_write(Path(path), dump_yaml(data, header))
