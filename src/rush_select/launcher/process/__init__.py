"""Child process spawning and supervision."""

from rush_select.launcher.process.base import (
    CompletionEvent,
    ProcessCompletion,
    ProcessHandle,
)
from rush_select.launcher.process.runner import ProcessRunner, SpawnedProcess, render_prefix
from rush_select.launcher.process.supervisor import BatchResult, await_all

__all__ = [
    "BatchResult",
    "CompletionEvent",
    "ProcessCompletion",
    "ProcessHandle",
    "ProcessRunner",
    "SpawnedProcess",
    "await_all",
    "render_prefix",
]
