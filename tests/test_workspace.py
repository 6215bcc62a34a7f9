from __future__ import annotations

import json
from pathlib import Path

import allure
import pytest

from rush_select.workspace import (
    WorkspaceError,
    discover_workspace,
    find_workspace_root,
    list_projects,
    strip_json_comments,
)

pytestmark = [
    allure.epic("Workspace"),
    allure.feature("Project Discovery"),
]


def test_discover_workspace_from_nested_directory(make_workspace) -> None:
    root = make_workspace({"@scope/app": {"build": "tsc", "start": "node ."}, "lib": {}})
    nested = root / "packages" / "app" / "src"
    nested.mkdir(parents=True)

    workspace = discover_workspace(start=nested)

    assert workspace.root == root.resolve()
    assert [project.package_name for project in workspace.projects] == ["@scope/app", "lib"]
    assert workspace.projects[0].project_folder == "packages/app"
    assert workspace.projects[0].available_scripts == ("build", "start")
    assert workspace.projects[1].available_scripts == ()


def test_find_workspace_root_fails_outside_workspace(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceError, match="Could not find rush.json"):
        find_workspace_root(tmp_path)


def test_root_override_without_rush_json_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceError, match="No rush.json"):
        discover_workspace(root_override=tmp_path)


def test_rush_json_comments_and_trailing_commas_are_accepted(make_workspace) -> None:
    root = make_workspace(
        {"app": {"build": "tsc"}},
        header='/* generated */\n// see "https://rushjs.io"\n',
    )
    rush_json = root / "rush.json"
    config = rush_json.read_text("utf-8").replace('"projects"', '"x": [1, 2,],\n"projects"')
    rush_json.write_text(config, "utf-8")

    projects = list_projects(root)

    assert [project.package_name for project in projects] == ["app"]


def test_trailing_comma_before_commented_out_projects_is_accepted(tmp_path: Path) -> None:
    (tmp_path / "rush.json").write_text(
        "{\n"
        '  "projects": [\n'
        '    {"packageName": "a", "projectFolder": "a"},\n'
        '    // {"packageName": "b", "projectFolder": "b"},\n'
        "    /* retired */\n"
        "  ]\n"
        "}\n",
        "utf-8",
    )

    projects = list_projects(tmp_path)

    assert [project.package_name for project in projects] == ["a"]


def test_strip_json_comments_keeps_commas_inside_strings() -> None:
    text = '{"a": ",]", "b": [",}" , ],}'

    assert json.loads(strip_json_comments(text)) == {"a": ",]", "b": [",}"]}


def test_strip_json_comments_keeps_slashes_inside_strings() -> None:
    text = (
        '{\n  "$schema": "https://example.com/rush.schema.json", // trailing\n'
        '  "a": "/* no */",\n}'
    )

    assert json.loads(strip_json_comments(text)) == {
        "$schema": "https://example.com/rush.schema.json",
        "a": "/* no */",
    }


def test_duplicate_package_names_are_rejected(tmp_path: Path) -> None:
    (tmp_path / "rush.json").write_text(
        json.dumps(
            {
                "projects": [
                    {"packageName": "app", "projectFolder": "a"},
                    {"packageName": "app", "projectFolder": "b"},
                ],
            },
        ),
        "utf-8",
    )

    with pytest.raises(WorkspaceError, match="Duplicate packageName"):
        list_projects(tmp_path)


def test_project_entry_without_folder_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "rush.json").write_text(
        json.dumps({"projects": [{"packageName": "app"}]}),
        "utf-8",
    )

    with pytest.raises(WorkspaceError, match="projectFolder"):
        list_projects(tmp_path)


def test_invalid_rush_json_is_reported(tmp_path: Path) -> None:
    (tmp_path / "rush.json").write_text("{ not json", "utf-8")

    with pytest.raises(WorkspaceError, match="Invalid JSON"):
        list_projects(tmp_path)


def test_unreadable_package_json_yields_no_scripts(tmp_path: Path, caplog) -> None:
    (tmp_path / "rush.json").write_text(
        json.dumps({"projects": [{"packageName": "app", "projectFolder": "app"}]}),
        "utf-8",
    )
    (tmp_path / "app").mkdir()
    (tmp_path / "app" / "package.json").write_text("{ broken", "utf-8")

    projects = list_projects(tmp_path)

    assert projects[0].available_scripts == ()
    assert "Cannot read" in caplog.text
