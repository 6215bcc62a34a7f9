"""Runtime configuration for the launcher."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_STATE_PATH = Path("~/.rush-select/selections.json")


class ConfigurationError(ValueError):
    """Settings cannot be used to run the launcher."""


@dataclass(slots=True)
class RunnerSettings:
    """Executables used to run workspace operations and project scripts."""

    workspace_tool: str = "rush"
    script_executable: str = "npm"
    script_command: tuple[str, ...] = ("run",)


@dataclass(slots=True)
class FilterSettings:
    """Default include/exclude script filters."""

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    state_path: Path = DEFAULT_STATE_PATH
    workspace_root: Path | None = None
    runner: RunnerSettings = field(default_factory=RunnerSettings)
    filters: FilterSettings = field(default_factory=FilterSettings)

    @classmethod
    def from_env(cls, workspace_root: Path | None = None) -> Settings:
        """Load settings from environment with defaults suitable for a Rush workspace."""

        root_raw = os.getenv("RUSH_SELECT_WORKSPACE_ROOT", "").strip()
        return cls(
            state_path=Path(
                os.getenv("RUSH_SELECT_STATE_PATH", str(DEFAULT_STATE_PATH)),
            ).expanduser(),
            workspace_root=workspace_root or (Path(root_raw) if root_raw else None),
            runner=RunnerSettings(
                workspace_tool=os.getenv("RUSH_SELECT_WORKSPACE_TOOL", "rush").strip(),
                script_executable=os.getenv("RUSH_SELECT_SCRIPT_EXECUTABLE", "npm").strip(),
                script_command=_split_command("RUSH_SELECT_SCRIPT_COMMAND", "run"),
            ),
            filters=FilterSettings(
                include=_collect_names("RUSH_SELECT_INCLUDE"),
                exclude=_collect_names("RUSH_SELECT_EXCLUDE"),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values the launcher cannot work with."""

        if not self.runner.workspace_tool:
            raise ConfigurationError("RUSH_SELECT_WORKSPACE_TOOL must not be empty.")
        if not self.runner.script_executable:
            raise ConfigurationError("RUSH_SELECT_SCRIPT_EXECUTABLE must not be empty.")
        if self.state_path.is_dir():
            raise ConfigurationError(
                "RUSH_SELECT_STATE_PATH must point to a file, "
                f"got directory: {str(self.state_path)!r}",
            )
        if self.workspace_root is not None and not self.workspace_root.is_dir():
            raise ConfigurationError(
                f"Workspace root is not a directory: {str(self.workspace_root)!r}",
            )


def _collect_names(name: str) -> tuple[str, ...]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return ()
    deduped: list[str] = []
    for part in raw.split(","):
        token = part.strip()
        if token and token not in deduped:
            deduped.append(token)
    return tuple(deduped)


def _split_command(name: str, default: str) -> tuple[str, ...]:
    value = os.getenv(name, default)
    try:
        return tuple(shlex.split(value))
    except ValueError as error:
        raise ConfigurationError(f"Invalid command for {name}: {value!r} ({error})") from error
