"""Discover the Rush workspace root and its projects."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rush_select.launcher.models import Project

logger = logging.getLogger(__name__)

RUSH_CONFIG_FILENAME = "rush.json"
PACKAGE_MANIFEST_FILENAME = "package.json"

# Strings are matched first so that "//" or "," inside a value is left alone.
_JSON_STRING = r'(?P<string>"(?:\\.|[^"\\])*")'
_JSONC_COMMENT = re.compile(
    _JSON_STRING + r"|//[^\n]*|/\*.*?\*/",
    re.DOTALL,
)
_TRAILING_COMMA = re.compile(_JSON_STRING + r"|,(?=\s*[}\]])")


class WorkspaceError(RuntimeError):
    """Workspace configuration is missing or unusable."""


@dataclass(frozen=True, slots=True)
class Workspace:
    """Workspace root with the projects declared in its rush.json."""

    root: Path
    projects: tuple[Project, ...]


def discover_workspace(start: Path | None = None, root_override: Path | None = None) -> Workspace:
    """Locate the workspace and read its projects once per launcher start."""

    root = root_override.resolve() if root_override else find_workspace_root(start or Path.cwd())
    if not (root / RUSH_CONFIG_FILENAME).is_file():
        raise WorkspaceError(f"No {RUSH_CONFIG_FILENAME} found in {root}")
    projects = tuple(list_projects(root))
    logger.debug("Discovered %d project(s) in %s", len(projects), root)
    return Workspace(root=root, projects=projects)


def find_workspace_root(start: Path) -> Path:
    """Return the closest directory at or above ``start`` holding rush.json."""

    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / RUSH_CONFIG_FILENAME).is_file():
            return candidate
    raise WorkspaceError(
        f"Could not find {RUSH_CONFIG_FILENAME} in {current} or any parent directory.",
    )


def load_rush_config(root: Path) -> dict[str, Any]:
    """Parse rush.json, which may contain comments and trailing commas."""

    path = root / RUSH_CONFIG_FILENAME
    try:
        text = path.read_text("utf-8")
    except OSError as error:
        raise WorkspaceError(f"Cannot read {path}: {error}") from error
    try:
        payload = json.loads(strip_json_comments(text))
    except ValueError as error:
        raise WorkspaceError(f"Invalid JSON in {path}: {error}") from error
    if not isinstance(payload, dict):
        raise WorkspaceError(f"Expected JSON object in {path}")
    return payload


def list_projects(root: Path) -> list[Project]:
    """Build one Project per rush.json entry with its package.json script names."""

    raw_projects = load_rush_config(root).get("projects", [])
    if not isinstance(raw_projects, list):
        raise WorkspaceError(f"'projects' in {root / RUSH_CONFIG_FILENAME} must be a list")

    projects: list[Project] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_projects):
        if not isinstance(raw, dict):
            raise WorkspaceError(f"projects[{index}] must be an object")
        package_name = raw.get("packageName")
        project_folder = raw.get("projectFolder")
        if not isinstance(package_name, str) or not package_name.strip():
            raise WorkspaceError(f"projects[{index}].packageName must be a non-empty string")
        if not isinstance(project_folder, str) or not project_folder.strip():
            raise WorkspaceError(f"projects[{index}].projectFolder must be a non-empty string")
        if package_name in seen:
            raise WorkspaceError(f"Duplicate packageName in rush.json: {package_name!r}")
        seen.add(package_name)
        projects.append(
            Project(
                package_name=package_name,
                project_folder=project_folder,
                available_scripts=_read_script_names(root / project_folder),
            ),
        )
    return projects


def strip_json_comments(text: str) -> str:
    """Remove // and /* */ comments and trailing commas outside of strings."""

    def _replace(match: re.Match[str]) -> str:
        return match.group("string") or ""

    without_comments = _JSONC_COMMENT.sub(_replace, text)
    return _TRAILING_COMMA.sub(_replace, without_comments)


def _read_script_names(project_dir: Path) -> tuple[str, ...]:
    manifest_path = project_dir / PACKAGE_MANIFEST_FILENAME
    try:
        manifest = json.loads(manifest_path.read_text("utf-8"))
    except FileNotFoundError:
        logger.warning("Project has no %s: %s", PACKAGE_MANIFEST_FILENAME, project_dir)
        return ()
    except (OSError, ValueError) as error:
        logger.warning("Cannot read %s: %s", manifest_path, error)
        return ()

    scripts = manifest.get("scripts") if isinstance(manifest, dict) else None
    if not isinstance(scripts, dict):
        return ()
    return tuple(name for name in scripts if isinstance(name, str))
