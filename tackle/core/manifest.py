"""包清单 (package.toml) 加载与校验

清单示例:
    name = "Example hook"
    version = "1.0.0"

    [[hooks.precommit]]
    id = "lint"
    command = ["ruff", "check", "."]
    dependencies = ["ruff"]

    [[hooks.precommit.conditions]]
    branch = ["main"]

严格模式: 任何未知字段都会被拒绝；同一清单内 hook id 不可重复。
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from tackle.core.exceptions import ManifestNotFoundError, ManifestParseError
from tackle.core.models import (
    HOOK_STAGES,
    HookCondition,
    HookDefinition,
    HookDefinitions,
    Package,
)

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.toml"

_PACKAGE_KEYS = frozenset(("name", "description", "version", "hooks"))
_HOOK_KEYS = frozenset(("id", "command", "dependencies", "conditions"))
_CONDITION_KEYS = ("successful", "failed", "skipped", "exists", "branch")


def manifest_path(package_dir: Path) -> Path:
    """包目录下的清单文件路径"""
    return package_dir / MANIFEST_FILENAME


def load_package(path: Path) -> Package:
    """从包目录或清单文件读取并解析 Package

    Raises:
        ManifestNotFoundError: 目录或清单文件不存在
        ManifestParseError: TOML 语法错误或结构不符合 schema
    """
    file = path if path.suffix == ".toml" else manifest_path(path)
    if not file.is_file():
        raise ManifestNotFoundError(f"找不到包清单: {file}")

    try:
        text = file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(f"读取包清单失败: {file}", details=[str(e)]) from e

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(f"包清单 TOML 语法错误: {file}", details=[str(e)]) from e

    package = parse_package(data, source=str(file))
    logger.debug("已加载包清单: %s (%s)", file, package.name or "<unnamed>")
    return package


def parse_package(data: dict[str, Any], *, source: str = "<memory>") -> Package:
    """按 schema 校验字典并构造 Package，收集全部错误后统一抛出"""
    errors: list[str] = []

    _check_keys(data, _PACKAGE_KEYS, "package", errors)
    for key in ("name", "description", "version"):
        if key in data and not isinstance(data[key], str):
            errors.append(f"{key}: 必须是字符串")

    hooks_data = data.get("hooks")
    hooks = HookDefinitions()
    if hooks_data is None:
        errors.append("hooks: 缺少必填字段")
    elif not isinstance(hooks_data, dict):
        errors.append("hooks: 必须是表")
    else:
        _check_keys(hooks_data, frozenset(HOOK_STAGES), "hooks", errors)
        for stage in HOOK_STAGES:
            entries = hooks_data.get(stage, [])
            if not isinstance(entries, list):
                errors.append(f"hooks.{stage}: 必须是数组")
                continue
            parsed = [
                _parse_hook(entry, f"hooks.{stage}[{i}]", errors)
                for i, entry in enumerate(entries)
            ]
            setattr(hooks, stage, [h for h in parsed if h is not None])
        _check_unique_ids(hooks, errors)

    if errors:
        raise ManifestParseError(f"包清单结构无效: {source}", details=errors)

    return Package(
        hooks=hooks,
        name=data.get("name"),
        description=data.get("description"),
        version=data.get("version"),
    )


def _check_keys(
    data: dict[str, Any], allowed: frozenset[str], where: str, errors: list[str],
) -> None:
    for key in data:
        if key not in allowed:
            errors.append(f"{where}: 未知字段 '{key}'")


def _string_list(value: Any, where: str, errors: list[str]) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        errors.append(f"{where}: 必须是字符串数组")
        return []
    return list(value)


def _parse_hook(entry: Any, where: str, errors: list[str]) -> HookDefinition | None:
    if not isinstance(entry, dict):
        errors.append(f"{where}: 必须是表")
        return None
    _check_keys(entry, _HOOK_KEYS, where, errors)

    hook_id = entry.get("id")
    if hook_id is not None and not isinstance(hook_id, str):
        errors.append(f"{where}.id: 必须是字符串")
        hook_id = None

    if "command" not in entry:
        errors.append(f"{where}.command: 缺少必填字段")
    command = _string_list(entry.get("command", []), f"{where}.command", errors)
    if "command" in entry and isinstance(entry["command"], list) and not command:
        errors.append(f"{where}.command: 不能为空")

    dependencies = _string_list(entry.get("dependencies", []), f"{where}.dependencies", errors)

    conditions: list[HookCondition] = []
    raw_conditions = entry.get("conditions", [])
    if not isinstance(raw_conditions, list):
        errors.append(f"{where}.conditions: 必须是数组")
        raw_conditions = []
    for i, cond in enumerate(raw_conditions):
        cwhere = f"{where}.conditions[{i}]"
        if not isinstance(cond, dict):
            errors.append(f"{cwhere}: 必须是表")
            continue
        _check_keys(cond, frozenset(_CONDITION_KEYS), cwhere, errors)
        conditions.append(HookCondition(**{
            key: _string_list(cond.get(key, []), f"{cwhere}.{key}", errors)
            for key in _CONDITION_KEYS
        }))

    return HookDefinition(
        id=hook_id,
        command=command,
        dependencies=dependencies,
        conditions=conditions,
    )


def _check_unique_ids(hooks: HookDefinitions, errors: list[str]) -> None:
    seen: set[str] = set()
    for stage in HOOK_STAGES:
        for hook in hooks.for_stage(stage):
            if hook.id is None:
                continue
            if hook.id in seen:
                errors.append(f"hooks.{stage}: hook id '{hook.id}' 重复")
            seen.add(hook.id)
