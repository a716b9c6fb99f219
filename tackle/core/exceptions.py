"""统一异常体系

所有可恢复的业务异常继承 TackleError，CLI 层据此输出带错误码的友好提示。

调度器误用（未知 hook id、非法状态迁移）属于编程契约违例，
不继承 TackleError，不应被捕获后重试。
"""

from __future__ import annotations


class TackleError(Exception):
    """tackle 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidIdentifierError(TackleError):
    """包标识格式非法（如缺少 '/' 分隔符）"""

    code = "INVALID_IDENTIFIER"


class AlreadyFetchedError(TackleError):
    """拉取目标目录已存在"""

    code = "ALREADY_FETCHED"


class CloneFailedError(TackleError):
    """git clone 失败（网络、鉴权、远端错误或超时）"""

    code = "CLONE_FAILED"


class PackageNotFoundError(TackleError):
    """所有来源都没有请求的版本"""

    code = "PACKAGE_NOT_FOUND"


class ManifestNotFoundError(TackleError):
    """包目录下找不到 package.toml"""

    code = "MANIFEST_NOT_FOUND"


class ManifestParseError(TackleError):
    """清单语法或结构错误，details 保留底层解析器的诊断信息"""

    code = "MANIFEST_PARSE_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        return base + "\n" + "\n".join(f"  - {d}" for d in self.details)


class RepositoryDiscoveryError(TackleError):
    """当前目录不在 git 工作区内"""

    code = "REPOSITORY_DISCOVERY_FAILED"


class CacheDirectoryError(TackleError):
    """缓存目录创建或访问失败"""

    code = "CACHE_IO_ERROR"


class ConfigError(TackleError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class NotInitializedError(TackleError):
    """项目尚未执行 tackle init"""

    code = "NOT_INITIALIZED"


class AlreadyInitializedError(TackleError):
    """项目已初始化"""

    code = "ALREADY_INITIALIZED"


class UnknownHookIdError(LookupError):
    """调度器中不存在该 hook id（编程错误）"""


class HookStateError(RuntimeError):
    """非法的 hook 状态迁移（编程错误）"""
