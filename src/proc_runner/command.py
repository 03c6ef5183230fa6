"""命令执行便捷入口。

run_command 为“带超时运行一条命令”的常见场景预先构建 LaunchConfig，
并保证任何异常都不会越过调用边界：所有失败都转换为 CommandResult。
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import replace
from pathlib import Path

from .runtime.process_runner import LaunchConfig, ProcessRunner
from .runtime.result import (
    INTERNAL_ERROR_EXIT_CODE,
    CommandResult,
    CommandStatus,
    RunState,
    classify_status,
)

__all__ = ["run_command"]

logger = logging.getLogger(__name__)


def _describe_error(exc: BaseException) -> str:
    """提取异常信息（单个子异常的 ExceptionGroup 展开为子异常）。"""
    while isinstance(exc, BaseExceptionGroup) and len(exc.exceptions) == 1:
        exc = exc.exceptions[0]
    return str(exc) or type(exc).__name__


async def run_command(
    executable: str,
    arguments: str | Sequence[str] = (),
    timeout: float | None = None,
    *,
    working_directory: Path | str | None = None,
    environment: Mapping[str, str] | None = None,
    runner: ProcessRunner | None = None,
) -> CommandResult:
    """运行命令并返回分类后的结果，从不抛出异常。

    同时捕获 stdout 和 stderr，stdin 固定为空。

    Args:
        executable: 可执行文件路径或名称
        arguments: 参数（单个字符串按 shell 规则拆分，或参数序列）
        timeout: 超时时间（秒），None 表示不限时
        working_directory: 工作目录（None = 继承）
        environment: 环境变量（None = 继承）
        runner: 自定义 ProcessRunner（默认按全局配置创建）

    Returns:
        CommandResult。内部异常时 status=ERROR，
        exit_code=INTERNAL_ERROR_EXIT_CODE，stderr 为异常信息。

    Raises:
        asyncio.CancelledError: 调用方任务被取消（不视为错误）
    """
    started_at = time.perf_counter()

    try:
        config = LaunchConfig(
            executable=executable,
            arguments=arguments,
            capture_stdout=True,
            capture_stderr=True,
            working_directory=Path(working_directory) if working_directory is not None else None,
            environment=environment,
            timeout=timeout,
        )
        result = await (runner or ProcessRunner()).run(config)
        result = replace(result, status=classify_status(result.exit_code, result.stderr))

    except asyncio.CancelledError:
        logger.info(f"run_command cancelled: {executable}")
        raise

    except Exception as e:
        logger.error(
            f"run_command failed: executable={executable}, "
            f"state={RunState.INTERNAL_ERROR.value}, "
            f"type={type(e).__name__}, msg={e}"
        )
        return CommandResult(
            exit_code=INTERNAL_ERROR_EXIT_CODE,
            stderr=_describe_error(e),
            execution_time_ms=int((time.perf_counter() - started_at) * 1000),
            status=CommandStatus.ERROR,
        )

    return replace(
        result,
        execution_time_ms=int((time.perf_counter() - started_at) * 1000),
    )
