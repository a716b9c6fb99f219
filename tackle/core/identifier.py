"""包标识规范化

将用户输入的包字符串转换为无歧义的 host/owner/repo[/subpath] 形式:
  - "skyezerfox/hooks"                      -> github.com/skyezerfox/hooks, subpath "."
  - "github.com/skyezerfox/hooks/some/sub"  -> github.com/skyezerfox/hooks, subpath "some/sub"
  - "mygitserver.com/skyezerfox/hooks"      -> host 保持不变

纯函数，无 I/O；结果同时作为缓存键与 clone URL 的基础。
"""

from __future__ import annotations

import re

from tackle.core.exceptions import InvalidIdentifierError
from tackle.core.models import CanonicalId

DEFAULT_HOST = "github.com"

# 首段形如 DNS 主机名: label{2,61}.tld{2,}
_HOST_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-]{1,61}[a-zA-Z0-9]\.[a-zA-Z]{2,}")
_SAFE_SEGMENT_RE = re.compile(r"^[a-zA-Z0-9_.\-]+$")


def looks_like_host(segment: str) -> bool:
    """判断路径首段是否为主机名"""
    return _HOST_RE.match(segment) is not None


def canonicalize(raw: str) -> CanonicalId:
    """规范化包标识

    Raises:
        InvalidIdentifierError: 不含 '/'、段为空或非法、不足 host/owner/repo 三段
    """
    package = raw.strip()
    if "/" not in package:
        raise InvalidIdentifierError(
            f"非法的包标识 '{raw}': 至少需要 owner/repo 形式"
        )

    first = package.split("/", 1)[0]
    qualified = package if looks_like_host(first) else f"{DEFAULT_HOST}/{package}"

    segments = qualified.split("/")
    for seg in segments:
        if not seg or seg in (".", "..") or not _SAFE_SEGMENT_RE.match(seg):
            raise InvalidIdentifierError(
                f"非法的包标识 '{raw}': 路径段 '{seg}' 不合法"
            )
    if len(segments) < 3:
        raise InvalidIdentifierError(
            f"非法的包标识 '{raw}': 需要 host/owner/repo 三段，实际 {len(segments)} 段"
        )

    repo_id = "/".join(segments[:3])
    subpath = "/".join(segments[3:]) or "."
    return CanonicalId(repo_id=repo_id, subpath=subpath)
