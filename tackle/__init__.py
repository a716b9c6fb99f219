"""tackle - 跨平台 git hook 包管理器"""

__version__ = "0.1.0"
