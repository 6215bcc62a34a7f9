"""Spawn child processes that stream prefixed output to the console."""

from __future__ import annotations

import itertools
import logging
import shutil
import subprocess
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

import click

from rush_select.launcher.models import PlannedScript
from rush_select.launcher.process.base import ProcessCompletion, ProcessHandle

logger = logging.getLogger(__name__)

MISSING_EXECUTABLE_EXIT_CODE = -2
_PREFIX_COLORS = ("cyan", "magenta", "yellow", "green", "blue", "bright_red")
_OUTPUT_LOCK = threading.Lock()


def render_prefix(package_name: str, script: str) -> str:
    """Label shown in front of every output line of one process."""

    return f"{package_name} > {script} "


class SpawnedProcess(ProcessHandle):
    """Handle for a live child whose merged stdout/stderr is echoed line by line.

    One thread waits for the exit and reports it, a second pumps output and
    reports the stream close once the exit has been seen.
    """

    def __init__(
        self,
        process: subprocess.Popen[str],
        *,
        label: str,
        prefix: str,
        output: TextIO | None = None,
        color: bool | None = None,
    ) -> None:
        super().__init__(label)
        self.pid = process.pid
        self._process = process
        self._prefix = prefix
        self._output = output
        self._color = color
        self._exited = threading.Event()
        self._exit_thread = threading.Thread(
            target=self._watch_exit,
            name=f"exit:{label}",
            daemon=True,
        )
        self._output_thread = threading.Thread(
            target=self._pump_output,
            name=f"output:{label}",
            daemon=True,
        )
        self._exit_thread.start()
        self._output_thread.start()

    def wait(self, timeout: float | None = None) -> ProcessCompletion:
        """Block until the handle resolves and every output line has been echoed."""

        completion = super().wait(timeout)
        self._output_thread.join(timeout)
        return completion

    def _watch_exit(self) -> None:
        exit_code = self._process.wait()
        self.mark_exited(exit_code)
        self._exited.set()

    def _pump_output(self) -> None:
        stream = self._process.stdout
        try:
            if stream is not None:
                for line in stream:
                    _echo_line(self._prefix, line, output=self._output, color=self._color)
        finally:
            if stream is not None:
                stream.close()
            self._exited.wait()
            self.mark_closed(self._process.returncode)


class ProcessRunner:
    """Start processes relative to a workspace root without waiting for them."""

    def __init__(
        self,
        workspace_root: Path,
        *,
        output: TextIO | None = None,
        color: bool | None = None,
    ) -> None:
        self.workspace_root = workspace_root
        self._output = output
        self._color = color
        self._colors = itertools.cycle(_PREFIX_COLORS)

    def spawn_all(self, entries: Sequence[PlannedScript]) -> list[ProcessHandle]:
        """Start one process per entry with prefixes padded to a shared width."""

        width = max(
            (len(render_prefix(entry.package_name, entry.script)) for entry in entries),
            default=0,
        )
        handles: list[ProcessHandle] = []
        for entry in entries:
            prefix = render_prefix(entry.package_name, entry.script).ljust(width)
            handles.append(
                self.spawn(
                    entry.executable,
                    entry.args,
                    cwd=self.working_directory(entry),
                    label=f"{entry.package_name} > {entry.script}",
                    prefix=prefix,
                ),
            )
        return handles

    def spawn(
        self,
        executable: str,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        label: str,
        prefix: str | None = None,
    ) -> ProcessHandle:
        """Start ``executable`` and return its handle immediately.

        A process that cannot be started yields an already-resolved handle
        whose stream-close code is the negated OS error number.
        """

        run_cwd = cwd or self.workspace_root
        styled_prefix = click.style(
            prefix if prefix is not None else f"{label} ",
            fg=next(self._colors),
        )
        run_args = [shutil.which(executable) or executable, *args]
        logger.debug("Spawning %s in %s", " ".join([executable, *args]), run_cwd)
        try:
            process = subprocess.Popen(  # noqa: S603
                run_args,
                cwd=run_cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as error:
            _echo_line(
                styled_prefix,
                f"failed to start {executable}: {error.strerror or error}",
                output=self._output,
                color=self._color,
            )
            handle = ProcessHandle(label)
            handle.mark_closed(-error.errno if error.errno else MISSING_EXECUTABLE_EXIT_CODE)
            return handle

        return SpawnedProcess(
            process,
            label=label,
            prefix=styled_prefix,
            output=self._output,
            color=self._color,
        )

    def working_directory(self, entry: PlannedScript) -> Path:
        if entry.project is None:
            return self.workspace_root
        return (self.workspace_root / entry.project.project_folder).resolve()


def _echo_line(prefix: str, line: str, *, output: TextIO | None, color: bool | None) -> None:
    with _OUTPUT_LOCK:
        click.echo(prefix + line.rstrip("\r\n"), file=output, color=color)
