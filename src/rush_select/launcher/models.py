"""Domain models for selections, execution groups and plans."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

PRE_GROUP_ID = "rush"
BUILD_GROUP_ID = "rush build"
IGNORE_SCRIPT = "ignore"


class BuildMode(str, Enum):
    """Workspace build modes offered by the build execution group."""

    IGNORE = "ignore"
    SMART = "smart"
    REGULAR = "regular"
    REBUILD = "rebuild"


class RunState(str, Enum):
    """Run loop states."""

    SELECTING = "selecting"
    RUNNING_PRE = "running_pre"
    RUNNING_BUILD = "running_build"
    RUNNING_MAIN = "running_main"
    ABORTED = "aborted"
    FATAL = "fatal"


@dataclass(frozen=True, slots=True)
class Project:
    """One buildable unit of the workspace."""

    package_name: str
    project_folder: str
    available_scripts: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Selection:
    """One operator choice; ``script=None`` or ``"ignore"`` means the row was skipped."""

    package_name: str
    script: str | None
    script_executable: str | None = None
    script_command: tuple[str, ...] | None = None

    @property
    def is_skip(self) -> bool:
        return self.script is None or self.script == IGNORE_SCRIPT


@dataclass(frozen=True, slots=True)
class ExecutionGroup:
    """Static category of workspace-wide choices shown above the projects."""

    name: str
    category: str
    script_names: tuple[str, ...]
    initial: int = 0
    allow_multiple_scripts: bool = True
    script_executable: str = "rush"
    script_command: tuple[str, ...] = ()
    sort_key: str = "_"


@dataclass(frozen=True, slots=True)
class ScriptDefaults:
    """Runner used for selections that do not name their own executable."""

    executable: str = "npm"
    command: tuple[str, ...] = ("run",)


@dataclass(frozen=True, slots=True)
class PlannedScript:
    """Selection resolved into a concrete command line."""

    package_name: str
    script: str
    executable: str
    command: tuple[str, ...]
    project: Project | None = None

    @property
    def args(self) -> list[str]:
        return [*self.command, self.script]


@dataclass(frozen=True, slots=True)
class Plan:
    """Non-skip selections of one cycle partitioned into the three phases."""

    pre: tuple[PlannedScript, ...] = ()
    build: Selection | None = None
    main: tuple[PlannedScript, ...] = ()

    @property
    def size(self) -> int:
        return len(self.pre) + (1 if self.build is not None else 0) + len(self.main)

    def packages_with_main_scripts(self) -> tuple[str, ...]:
        """Distinct package names of ``main`` in first-seen order."""

        seen: dict[str, None] = {}
        for entry in self.main:
            seen.setdefault(entry.package_name, None)
        return tuple(seen)


@dataclass(frozen=True, slots=True)
class BuildInvocation:
    """Concrete workspace build command decided for one cycle."""

    executable: str
    args: tuple[str, ...]
    label: str
    announcement: str = field(default="", compare=False)

    @property
    def command_line(self) -> str:
        return " ".join([self.executable, *self.args])


def default_execution_groups(workspace_tool: str = "rush") -> tuple[ExecutionGroup, ...]:
    """Build the pre-script and workspace-build groups for ``workspace_tool``."""

    return (
        ExecutionGroup(
            name=PRE_GROUP_ID,
            category="pre-scripts (executes from top to bottom)",
            script_names=(IGNORE_SCRIPT, "install", "update"),
            initial=0,
            allow_multiple_scripts=True,
            script_executable=workspace_tool,
            script_command=(),
            sort_key="_",
        ),
        ExecutionGroup(
            name=BUILD_GROUP_ID,
            category=f"{workspace_tool} build (recommended: smart)",
            script_names=tuple(mode.value for mode in BuildMode),
            initial=1,
            allow_multiple_scripts=False,
            script_executable=workspace_tool,
            script_command=(),
            sort_key="__",
        ),
    )
