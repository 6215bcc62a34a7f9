"""Partition picker selections into pre, build and main phases."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from rush_select.launcher.models import (
    BUILD_GROUP_ID,
    PRE_GROUP_ID,
    Plan,
    PlannedScript,
    Project,
    ScriptDefaults,
    Selection,
)
from rush_select.state import SavedSelection

logger = logging.getLogger(__name__)


class SelectionRecorder(Protocol):
    """Destination for the main selections of the latest cycle."""

    def save(self, root: Path, selections: Sequence[SavedSelection]) -> None:
        """Overwrite the saved selections for ``root``."""


def build_plan(
    selections: Sequence[Selection],
    projects: Sequence[Project],
    *,
    recorder: SelectionRecorder,
    workspace_root: Path,
    defaults: ScriptDefaults = ScriptDefaults(),
) -> Plan | None:
    """Build the execution plan for one cycle.

    Skip selections are dropped first. Rows of the pre-script group keep the
    order the picker returned them in, and so do main selections. A main
    selection whose package is not a known project is dropped. The resolved
    main selections are saved through ``recorder`` before returning.

    Returns ``None`` when nothing at all was selected.
    """

    projects_by_name = {project.package_name: project for project in projects}
    pre: list[PlannedScript] = []
    build: Selection | None = None
    main: list[PlannedScript] = []

    for selection in selections:
        if selection.is_skip:
            continue
        if selection.package_name == PRE_GROUP_ID:
            pre.append(_resolve(selection, project=None, defaults=defaults))
            continue
        if selection.package_name == BUILD_GROUP_ID:
            build = selection
            continue

        project = projects_by_name.get(selection.package_name)
        if project is None:
            logger.debug("Dropping selection for unknown package %s", selection.package_name)
            continue
        main.append(_resolve(selection, project=project, defaults=defaults))

    _record_main(recorder, workspace_root, main)

    plan = Plan(pre=tuple(pre), build=build, main=tuple(main))
    if plan.size == 0:
        return None
    return plan


def _resolve(
    selection: Selection,
    *,
    project: Project | None,
    defaults: ScriptDefaults,
) -> PlannedScript:
    return PlannedScript(
        package_name=selection.package_name,
        script=selection.script or "",
        executable=selection.script_executable or defaults.executable,
        command=(
            selection.script_command
            if selection.script_command is not None
            else defaults.command
        ),
        project=project,
    )


def _record_main(
    recorder: SelectionRecorder,
    workspace_root: Path,
    main: Sequence[PlannedScript],
) -> None:
    saved = [SavedSelection(package_name=item.package_name, script=item.script) for item in main]
    try:
        recorder.save(workspace_root, saved)
    except OSError as error:
        logger.warning("Could not save selections for %s: %s", workspace_root, error)
