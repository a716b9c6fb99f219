"""集中配置管理

用户级配置文件默认位于 ~/.tackle/config.yml，可由 TACKLE_CONFIG 环境变量
或 CLI --config 覆盖。文件不存在时使用默认值。

示例:
    repositories:
      - https://github.com/tackle-hooks/
      - https://git.example.com/hooks/
    git_timeout: 60
    hook_timeout: 600
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from tackle.core.exceptions import ConfigError
from tackle.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TACKLE_CONFIG"


def default_config_path() -> Path:
    """默认配置文件路径: ~/.tackle/config.yml"""
    env = os.getenv(CONFIG_ENV_VAR, "")
    if env:
        return Path(env)
    return Path.home() / ".tackle" / "config.yml"


@dataclass
class Config:
    """tackle 全局配置"""

    # 版本解析来源，按优先级排列
    repositories: list[str] = field(default_factory=list)

    # 并发与超时
    max_workers: int = 8
    git_timeout: float | None = 120.0       # 单次 git 操作超时（秒）
    hook_timeout: int | None = None         # 单个 hook 命令超时（秒）

    log_level: str = "INFO"

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str | Path | None = None) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        p = Path(path) if path else default_config_path()
        try:
            data = load_yaml(p)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"配置文件无效: {p}: {e}") from e
        if not data:
            return cls()

        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}

        repos = matched.get("repositories", [])
        if not isinstance(repos, list) or not all(isinstance(r, str) for r in repos):
            raise ConfigError(f"配置项 repositories 必须是字符串列表: {p}")
        if "max_workers" in matched and (
            not isinstance(matched["max_workers"], int) or matched["max_workers"] < 1
        ):
            raise ConfigError(f"配置项 max_workers 必须是正整数: {p}")

        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# 全局单例，由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str | Path | None = None) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.debug("配置已加载: %s", path or default_config_path())
    return _current
