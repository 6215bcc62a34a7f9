"""Decide which workspace build command a cycle runs."""

from __future__ import annotations

from collections.abc import Sequence

from rush_select.launcher.models import BuildInvocation, BuildMode, Selection

SCOPE_FLAG = "--to"


def select_build_invocation(
    build_choice: Selection | None,
    packages_with_main_scripts: Sequence[str],
    *,
    workspace_tool: str = "rush",
) -> BuildInvocation | None:
    """Return the build command for ``build_choice`` or ``None`` to skip the phase.

    ``smart`` scopes the build to the packages that will run main scripts, one
    ``--to <package>`` pair per package in the given order, and is skipped when
    there are none. ``regular`` is an unscoped incremental build and
    ``rebuild`` a clean rebuild of everything. Any other value skips the phase.
    """

    if build_choice is None:
        return None

    script = build_choice.script
    if script == BuildMode.SMART.value:
        if not packages_with_main_scripts:
            return None
        args = ["build"]
        for package_name in _unique(packages_with_main_scripts):
            args.extend((SCOPE_FLAG, package_name))
        return _invocation(
            workspace_tool,
            args,
            label=f"smart {workspace_tool} build",
            announcement=f"Starting smart {workspace_tool} build step",
        )
    if script == BuildMode.REGULAR.value:
        return _invocation(
            workspace_tool,
            ["build"],
            label=f"incremental {workspace_tool} build",
            announcement=f"Starting regular {workspace_tool} build step",
        )
    if script == BuildMode.REBUILD.value:
        return _invocation(
            workspace_tool,
            ["rebuild"],
            label=f"{workspace_tool} rebuild",
            announcement=(
                f"Starting {workspace_tool} rebuild step, building everything. Grab coffee.."
            ),
        )
    return None


def _invocation(
    executable: str,
    args: list[str],
    *,
    label: str,
    announcement: str,
) -> BuildInvocation:
    command_line = " ".join([executable, *args])
    return BuildInvocation(
        executable=executable,
        args=tuple(args),
        label=label,
        announcement=f"{announcement}: {command_line}",
    )


def _unique(values: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(values))
