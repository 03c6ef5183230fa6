"""进程执行结果类型定义。

定义 CommandResult、状态枚举、运行状态机以及状态分类规则。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

__all__ = [
    "CommandStatus",
    "RunState",
    "CommandResult",
    "classify_status",
    "INTERNAL_ERROR_EXIT_CODE",
]

# 内部错误路径使用的保留退出码（非真实进程退出码）
INTERNAL_ERROR_EXIT_CODE = 27


class CommandStatus(str, Enum):
    """命令执行状态（粗粒度分类）。

    - success: 进程正常结束（退出码为 0，或 stderr 为空）
    - error: 退出码 > 0 且 stderr 有非空白内容，或内部异常
    - timeout: 未获得退出码（超时被终止，或未能启动）
    """

    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


class RunState(str, Enum):
    """单次调用的生命周期状态。

    NOT_STARTED -> RUNNING -> {COMPLETED, TIMED_OUT, START_FAILED, INTERNAL_ERROR}
    """

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    START_FAILED = "start_failed"
    INTERNAL_ERROR = "internal_error"

    @property
    def is_terminal(self) -> bool:
        """是否为终止状态。"""
        return self not in (RunState.NOT_STARTED, RunState.RUNNING)


def classify_status(exit_code: int | None, stderr: str) -> CommandStatus:
    """根据退出码和 stderr 分类执行状态。

    规则:
    - 没有退出码 -> TIMEOUT
    - 退出码 > 0 且 stderr 含非空白内容 -> ERROR
    - 其他情况 -> SUCCESS

    注意：退出码 > 0 但 stderr 为空时仍然是 SUCCESS，
    被信号终止的负退出码同样不视为 ERROR。

    Args:
        exit_code: 进程退出码（None 表示未获得）
        stderr: 捕获的标准错误输出

    Returns:
        对应的 CommandStatus
    """
    if exit_code is None:
        return CommandStatus.TIMEOUT
    if exit_code > 0 and stderr.strip():
        return CommandStatus.ERROR
    return CommandStatus.SUCCESS


@dataclass(frozen=True)
class CommandResult:
    """一次进程调用的结果。

    构造后不可修改；需要填充字段时使用 dataclasses.replace 派生新实例。
    不带参数构造即为“空”结果（无退出码、空缓冲、耗时 0）。

    Attributes:
        exit_code: 进程退出码，None 表示超时被终止或进程未启动
        stdout: 捕获的标准输出（仅当启用捕获时）
        stderr: 捕获的标准错误（仅当启用捕获时），内部错误时为异常信息
        execution_time_ms: 从调用开始到返回的耗时（毫秒）
        status: 粗粒度状态分类
        started: 进程是否成功启动（False 表示启动失败）
    """

    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    execution_time_ms: int = 0
    status: CommandStatus = CommandStatus.SUCCESS
    started: bool = True

    @property
    def ok(self) -> bool:
        """是否成功。"""
        return self.status is CommandStatus.SUCCESS

    @property
    def timed_out(self) -> bool:
        """是否超时（包括未能启动的情况）。"""
        return self.status is CommandStatus.TIMEOUT

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式。"""
        result: dict[str, Any] = {
            "status": self.status.value,
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "execution_time_ms": self.execution_time_ms,
        }
        if not self.started:
            result["started"] = False
        return result
