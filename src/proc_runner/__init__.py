"""proc-runner - 异步子进程执行器。

启动外部进程，并发读取 stdout/stderr，支持超时终止，
返回统一的 CommandResult。

环境变量:
    PRN_DEFAULT_TIMEOUT: 默认超时时间（秒）
    PRN_PRESERVE_NEWLINES: 是否保留输出换行 (默认 true)
    PRN_LOG_DEBUG: 日志调试模式 (默认 false)

用法:
    proc-runner --timeout 10 -- git status
"""

__version__ = "0.1.0"

from .command import run_command
from .runtime import (
    INTERNAL_ERROR_EXIT_CODE,
    CommandResult,
    CommandStatus,
    LaunchConfig,
    ProcessRunner,
    RunState,
    classify_status,
)

__all__ = [
    "__version__",
    "run_command",
    "LaunchConfig",
    "ProcessRunner",
    "CommandResult",
    "CommandStatus",
    "RunState",
    "classify_status",
    "INTERNAL_ERROR_EXIT_CODE",
]
