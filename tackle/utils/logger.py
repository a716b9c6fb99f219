"""tackle 日志配置

CLI 入口调用 setup_logging 一次；各模块只使用 logging.getLogger(__name__)。
支持人类可读文本与结构化 JSON 两种输出，JSON 便于在 CI 中采集 hook 执行日志。

hook 执行相关的日志通过 extra 附带上下文，例如:
    logger.info("完成: %s", name, extra={"package": pkg, "hook": name, "status": "failed"})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

TEXT_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"

# 经 extra 传入、JSON 输出时提升为顶层字段的上下文键
CONTEXT_FIELDS = ("stage", "package", "hook", "status", "duration")


class JSONFormatter(logging.Formatter):
    """每条记录输出一行 JSON

    固定字段: timestamp / level / logger / message / source（模块:行号）；
    记录带有 CONTEXT_FIELDS 中的上下文时逐项附加，有异常时附加 exception。
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.lineno}",
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器，输出到 stderr（stdout 留给命令结果）

    重复调用时先清理已有 handlers。
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)


def reset_logging() -> None:
    """清理根日志器的全部 handlers（测试中重新配置时使用）"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
