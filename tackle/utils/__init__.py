"""通用工具: 日志、YAML、git 与子进程封装"""
