"""Completion tracking shared by every child process handle."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import cast


class CompletionEvent(str, Enum):
    """Terminal notifications a child process can deliver."""

    EXIT = "exit"
    CLOSE = "close"


@dataclass(frozen=True, slots=True)
class ProcessCompletion:
    """First terminal notification observed for a process."""

    event: CompletionEvent
    exit_code: int

    @property
    def failed(self) -> bool:
        return self.exit_code != 0


class ProcessHandle:
    """Reference to a running child that resolves exactly once.

    A child reports both when it exits and when its output stream closes.
    Whichever arrives first decides the completion; later notifications are
    kept in ``notifications`` but never change it.
    """

    def __init__(self, label: str) -> None:
        self.label = label
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._completion: ProcessCompletion | None = None
        self._notifications: list[ProcessCompletion] = []

    def mark_exited(self, exit_code: int) -> bool:
        """Record the exit notification. Returns True if it resolved the handle."""

        return self._notify(ProcessCompletion(CompletionEvent.EXIT, exit_code))

    def mark_closed(self, exit_code: int) -> bool:
        """Record the stream-close notification. Returns True if it resolved the handle."""

        return self._notify(ProcessCompletion(CompletionEvent.CLOSE, exit_code))

    def wait(self, timeout: float | None = None) -> ProcessCompletion:
        """Block until the handle resolves and return its completion."""

        if not self._done.wait(timeout):
            raise TimeoutError(f"Process {self.label!r} did not finish in {timeout}s")
        return cast(ProcessCompletion, self._completion)

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def notifications(self) -> tuple[ProcessCompletion, ...]:
        with self._lock:
            return tuple(self._notifications)

    def _notify(self, completion: ProcessCompletion) -> bool:
        with self._lock:
            self._notifications.append(completion)
            if self._completion is not None:
                return False
            self._completion = completion
        self._done.set()
        return True
