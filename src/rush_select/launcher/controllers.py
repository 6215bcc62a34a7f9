"""Controller wiring settings and collaborators for the launch command."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import click

from rush_select.choices import ScriptFilter
from rush_select.config import Settings
from rush_select.launcher.models import RunState, ScriptDefaults
from rush_select.launcher.process import ProcessRunner
from rush_select.launcher.run_loop import RunLoop
from rush_select.picker import RichPicker, SelectionPicker
from rush_select.state import SelectionStore
from rush_select.workspace import discover_workspace


@dataclass(slots=True)
class LaunchCommand:
    """CLI input for the interactive launcher."""

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    workspace_root: Path | None = None


class LauncherCliController:
    """Builds the run loop from settings and runs it until the operator quits."""

    def __init__(
        self,
        *,
        picker_factory: Callable[[], SelectionPicker] = RichPicker,
        emit: Callable[[str], None] = click.echo,
    ) -> None:
        self._picker_factory = picker_factory
        self._emit = emit

    def launch(self, command: LaunchCommand) -> RunState:
        settings = Settings.from_env(workspace_root=command.workspace_root)
        settings.validate()

        workspace = discover_workspace(root_override=settings.workspace_root)
        script_filter = ScriptFilter(
            include=command.include or settings.filters.include,
            exclude=command.exclude or settings.filters.exclude,
        )
        loop = RunLoop(
            workspace=workspace,
            picker=self._picker_factory(),
            store=SelectionStore(settings.state_path),
            runner=ProcessRunner(workspace.root),
            script_filter=script_filter,
            defaults=ScriptDefaults(
                executable=settings.runner.script_executable,
                command=settings.runner.script_command,
            ),
            workspace_tool=settings.runner.workspace_tool,
            emit=self._emit,
        )
        return loop.run()
