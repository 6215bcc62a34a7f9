"""State machine driving select, pre-scripts, build and main scripts."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

import click

from rush_select.choices import ScriptFilter, apply_saved_selections, create_choices
from rush_select.launcher.build_step import select_build_invocation
from rush_select.launcher.errors import PhaseFailedError, SelectionAborted
from rush_select.launcher.models import (
    ExecutionGroup,
    Plan,
    PlannedScript,
    RunState,
    ScriptDefaults,
    default_execution_groups,
)
from rush_select.launcher.plan import build_plan
from rush_select.launcher.process import BatchResult, ProcessHandle, await_all
from rush_select.picker import PickerConfig, SelectionPicker
from rush_select.state import SelectionStore
from rush_select.workspace import Workspace

logger = logging.getLogger(__name__)

PRE_PHASE = "pre-scripts"
BUILD_PHASE = "workspace build"


class ScriptSpawner(Protocol):
    """Starts processes and hands back their handles without waiting."""

    def spawn_all(self, entries: Sequence[PlannedScript]) -> list[ProcessHandle]:
        """Start every entry concurrently."""

    def spawn(
        self,
        executable: str,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        label: str,
        prefix: str | None = None,
    ) -> ProcessHandle:
        """Start one process."""


class RunLoop:
    """Repeats selection and execution cycles until the operator aborts.

    Each cycle runs the pre-scripts one at a time, then the workspace build
    if every pre-script succeeded, then all main scripts at once if the build
    succeeded too. A failed pre-script or build ends the loop with
    ``PhaseFailedError``; failed main scripts do not.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        workspace: Workspace,
        picker: SelectionPicker,
        store: SelectionStore,
        runner: ScriptSpawner,
        script_filter: ScriptFilter | None = None,
        groups: Sequence[ExecutionGroup] | None = None,
        defaults: ScriptDefaults | None = None,
        workspace_tool: str = "rush",
        supervise: Callable[[Sequence[ProcessHandle]], BatchResult] = await_all,
        emit: Callable[[str], None] = click.echo,
    ) -> None:
        self.workspace = workspace
        self.picker = picker
        self.store = store
        self.runner = runner
        self.script_filter = script_filter or ScriptFilter()
        if groups is None:
            groups = default_execution_groups(workspace_tool)
        self.groups = tuple(groups)
        self.defaults = defaults or ScriptDefaults()
        self.workspace_tool = workspace_tool
        self._supervise = supervise
        self._emit = emit
        self.state = RunState.SELECTING
        self.cycles = 0

    def run(self) -> RunState:
        """Run cycles until the picker is aborted; returns ``RunState.ABORTED``."""

        while self.run_cycle() is not RunState.ABORTED:
            pass
        return self.state

    def run_cycle(self) -> RunState:
        """Run one cycle and return the next state (SELECTING or ABORTED)."""

        self._transition(RunState.SELECTING)
        plan = self._select()
        if plan is None:
            self._transition(RunState.ABORTED)
            return self.state

        self.cycles += 1
        failed_phases: list[str] = []

        self._transition(RunState.RUNNING_PRE)
        if self._run_pre(plan):
            failed_phases.append(PRE_PHASE)
        else:
            self._transition(RunState.RUNNING_BUILD)
            if self._run_build(plan):
                failed_phases.append(BUILD_PHASE)

        if failed_phases:
            self._transition(RunState.FATAL)
            raise PhaseFailedError(tuple(failed_phases))

        self._transition(RunState.RUNNING_MAIN)
        self._run_main(plan)
        self._transition(RunState.SELECTING)
        return self.state

    def _select(self) -> Plan | None:
        choice_set = create_choices(self.workspace.projects, self.script_filter)
        apply_saved_selections(
            choice_set.choices,
            self.store.load(self.workspace.root),
            self.script_filter,
        )
        config = PickerConfig(
            groups=self.groups,
            choices=choice_set.choices,
            all_script_names=choice_set.all_script_names,
        )
        try:
            selections = self.picker.run(config)
        except SelectionAborted:
            logger.debug("Picker aborted by operator")
            return None
        if not selections:
            return None

        return build_plan(
            selections,
            self.workspace.projects,
            recorder=self.store,
            workspace_root=self.workspace.root,
            defaults=self.defaults,
        )

    def _run_pre(self, plan: Plan) -> bool:
        self._emit("Starting pre-scripts")
        failed = False
        # Each pre-script is awaited before the next one starts.
        for entry in plan.pre:
            result = self._supervise(self.runner.spawn_all([entry]))
            failed = failed or result.error
        return failed

    def _run_build(self, plan: Plan) -> bool:
        invocation = select_build_invocation(
            plan.build,
            plan.packages_with_main_scripts(),
            workspace_tool=self.workspace_tool,
        )
        if invocation is None:
            return False

        self._emit(invocation.announcement)
        logger.debug("Running build step: %s", invocation.command_line)
        handle = self.runner.spawn(
            invocation.executable,
            invocation.args,
            cwd=self.workspace.root,
            label=invocation.label,
        )
        return self._supervise([handle]).error

    def _run_main(self, plan: Plan) -> None:
        self._emit("Starting main scripts")
        result = self._supervise(self.runner.spawn_all(plan.main))
        if result.error:
            logger.warning("At least one main script exited with a non-zero code")

    def _transition(self, state: RunState) -> None:
        if state is not self.state:
            logger.debug("Run loop: %s -> %s", self.state.value, state.value)
        self.state = state
