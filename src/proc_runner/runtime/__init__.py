"""Runtime module for subprocess execution and result assembly.

This module provides deadlock-free process execution with concurrent
stream capture and timeout enforcement.
"""

from __future__ import annotations

from .process_runner import LaunchConfig, ProcessRunner
from .result import (
    INTERNAL_ERROR_EXIT_CODE,
    CommandResult,
    CommandStatus,
    RunState,
    classify_status,
)

__all__ = [
    "LaunchConfig",
    "ProcessRunner",
    "CommandResult",
    "CommandStatus",
    "RunState",
    "classify_status",
    "INTERNAL_ERROR_EXIT_CODE",
]
