"""Pytest 配置和 fixtures。"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 添加 src 目录到 Python 路径
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

# 测试用假 CLI 脚本
FAKE_CLI_PATH = PROJECT_ROOT / "tests" / "fixtures" / "fake_cli.py"


@pytest.fixture
def fake_cli() -> list[str]:
    """假 CLI 的命令行前缀（使用当前解释器）。"""
    return [sys.executable, str(FAKE_CLI_PATH)]


@pytest.fixture(autouse=True)
def clean_prn_env(monkeypatch: pytest.MonkeyPatch):
    """清除 PRN_* 环境变量并重置全局配置。"""
    from proc_runner.config import reload_config

    for key in ("PRN_DEFAULT_TIMEOUT", "PRN_ENCODING", "PRN_PRESERVE_NEWLINES",
                "PRN_STREAM_LIMIT", "PRN_LOG_DEBUG"):
        monkeypatch.delenv(key, raising=False)
    reload_config()
    yield
    reload_config()
