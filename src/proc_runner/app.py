"""proc-runner 命令行入口。

包含日志配置、参数解析和主入口点。结果以 JSON 输出到 stdout。
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from .command import run_command
from .config import Config, get_config
from .runtime import CommandResult, CommandStatus, ProcessRunner

__all__ = ["build_parser", "exit_status_for", "main"]

logger = logging.getLogger(__name__)

# 超时时的命令行退出码（与 coreutils timeout 一致）
TIMEOUT_EXIT_STATUS = 124

# 被信号终止时的退出码基数（128 + 信号编号）
SIGNAL_EXIT_BASE = 128

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """构建命令行参数解析器。"""
    parser = argparse.ArgumentParser(
        prog="proc-runner",
        description="Run a command with a timeout and print the result as JSON",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout in seconds (default: PRN_DEFAULT_TIMEOUT or unbounded)",
    )
    parser.add_argument("--cwd", default=None, help="Working directory")
    parser.add_argument(
        "--lossy-newlines",
        action="store_true",
        help="Concatenate output lines without separators",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    parser.add_argument("executable", help="Executable to run")
    parser.add_argument("arguments", nargs=argparse.REMAINDER, help="Arguments for the executable")
    return parser


def exit_status_for(result: CommandResult) -> int:
    """将结果映射为命令行退出码。

    - TIMEOUT -> 124
    - 被信号终止（负退出码）-> 128 + 信号编号
    - 其他 -> 进程退出码（内部错误时为保留退出码）
    """
    if result.status is CommandStatus.TIMEOUT or result.exit_code is None:
        return TIMEOUT_EXIT_STATUS
    if result.exit_code < 0:
        return SIGNAL_EXIT_BASE + abs(result.exit_code)
    return result.exit_code


def _configure_logging(config: Config, verbose: bool) -> None:
    """配置日志输出。"""
    log_handlers: list[logging.Handler] = []

    if config.log_debug and config.log_file:
        # LOG_DEBUG 模式：输出到临时文件
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(file_handler)
        log_level = logging.DEBUG
    else:
        # 默认模式：输出到 stderr
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log_handlers.append(stderr_handler)
        log_level = logging.DEBUG if verbose else logging.INFO

    # root logger（第三方库）保持 WARNING
    logging.basicConfig(level=logging.WARNING, handlers=log_handlers)
    logging.getLogger("proc_runner").setLevel(log_level)


def main(argv: Sequence[str] | None = None) -> int:
    """主入口点。

    Returns:
        命令行退出码
    """
    args = build_parser().parse_args(argv)
    config = get_config()
    _configure_logging(config, args.verbose)

    arguments = list(args.arguments)
    if arguments[:1] == ["--"]:
        arguments = arguments[1:]

    timeout = args.timeout if args.timeout is not None else config.default_timeout
    runner = ProcessRunner(preserve_newlines=config.preserve_newlines and not args.lossy_newlines)

    logger.debug(f"Running {args.executable} args={arguments} timeout={timeout}")
    result = asyncio.run(
        run_command(
            args.executable,
            arguments,
            timeout,
            working_directory=args.cwd,
            runner=runner,
        )
    )

    print(json.dumps(result.to_dict(), ensure_ascii=False))
    return exit_status_for(result)


if __name__ == "__main__":
    sys.exit(main())
