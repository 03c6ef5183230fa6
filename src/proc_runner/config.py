"""PRN 环境变量配置管理。

环境变量:
    PRN_DEFAULT_TIMEOUT: 默认超时时间（秒）
        - 空/未设置/无效/<=0 = 不限时 (默认)
        - 例: "30" 或 "2.5"

    PRN_ENCODING: 子进程输出解码使用的编码
        - 默认 utf-8

    PRN_PRESERVE_NEWLINES: 拼接输出行时是否保留换行符
        - true/1/yes = 保留 (默认)
        - false/0/no = 不保留（各行直接拼接）

    PRN_STREAM_LIMIT: 每个管道的读取缓冲区上限（字节）
        - 默认 1048576 (1 MiB)
        - 限制在 1 KiB - 64 MiB 范围

    PRN_LOG_DEBUG: 日志调试模式
        - true/1/yes = 开启 (日志输出到临时文件)
        - false/0/no = 关闭 (默认，日志输出到 stderr)
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

__all__ = ["Config", "load_config", "get_config", "reload_config"]

DEFAULT_ENCODING = "utf-8"
DEFAULT_STREAM_LIMIT = 1024 * 1024
MIN_STREAM_LIMIT = 1024
MAX_STREAM_LIMIT = 64 * 1024 * 1024


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """解析布尔值环境变量。"""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_timeout(value: str | None) -> float | None:
    """解析超时时间环境变量。

    Returns:
        超时秒数，None 表示不限时
    """
    if not value or not value.strip():
        return None
    try:
        timeout = float(value)
    except ValueError:
        return None
    if timeout <= 0:
        return None
    return timeout


def _parse_stream_limit(value: str | None) -> int:
    """解析读取缓冲区上限环境变量。"""
    if not value:
        return DEFAULT_STREAM_LIMIT
    try:
        limit = int(value)
    except ValueError:
        return DEFAULT_STREAM_LIMIT
    return max(MIN_STREAM_LIMIT, min(limit, MAX_STREAM_LIMIT))


@dataclass
class Config:
    """PRN 配置。

    Attributes:
        default_timeout: 默认超时时间（秒），None 表示不限时
        encoding: 输出解码编码
        preserve_newlines: 拼接输出行时是否保留换行符
        stream_limit: 读取缓冲区上限（超长行分块读取后拼接）
        log_debug: 日志调试模式（输出到临时文件）
        log_file: 日志文件路径（当 log_debug=True 时自动设置）
    """

    default_timeout: float | None = None
    encoding: str = DEFAULT_ENCODING
    preserve_newlines: bool = True
    stream_limit: int = DEFAULT_STREAM_LIMIT
    log_debug: bool = False
    log_file: str | None = None

    def __repr__(self) -> str:
        return (
            f"Config(default_timeout={self.default_timeout}, "
            f"encoding={self.encoding}, "
            f"preserve_newlines={self.preserve_newlines}, "
            f"stream_limit={self.stream_limit}, "
            f"log_debug={self.log_debug}, "
            f"log_file={self.log_file})"
        )


def _generate_log_file_path() -> str:
    """生成日志文件路径。

    Returns:
        临时目录下的日志文件绝对路径
    """
    log_dir = Path(tempfile.gettempdir()) / "proc-runner"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"prn_debug_{timestamp}.log"

    return str(log_file.resolve())


def load_config() -> Config:
    """从环境变量加载配置。"""
    log_debug = _parse_bool(os.environ.get("PRN_LOG_DEBUG"), default=False)
    log_file = _generate_log_file_path() if log_debug else None

    return Config(
        default_timeout=_parse_timeout(os.environ.get("PRN_DEFAULT_TIMEOUT")),
        encoding=os.environ.get("PRN_ENCODING", "").strip() or DEFAULT_ENCODING,
        preserve_newlines=_parse_bool(
            os.environ.get("PRN_PRESERVE_NEWLINES"), default=True
        ),
        stream_limit=_parse_stream_limit(os.environ.get("PRN_STREAM_LIMIT")),
        log_debug=log_debug,
        log_file=log_file,
    )


# 全局配置实例（延迟加载）
_config: Config | None = None


def get_config() -> Config:
    """获取全局配置实例。"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """重新加载配置（用于测试）。"""
    global _config
    _config = load_config()
    return _config
