from __future__ import annotations

import sys
from pathlib import Path

import allure
from click.testing import CliRunner

from rush_select import __version__
from rush_select.main import rush_select

pytestmark = [
    allure.epic("Launcher"),
    allure.feature("CLI"),
]


def _env(tmp_path: Path) -> dict[str, str]:
    return {
        "RUSH_SELECT_STATE_PATH": str(tmp_path / "state" / "selections.json"),
        "RUSH_SELECT_SCRIPT_EXECUTABLE": sys.executable,
        "RUSH_SELECT_SCRIPT_COMMAND": "-c",
        "RUSH_SELECT_WORKSPACE_ROOT": "",
        "RUSH_SELECT_INCLUDE": "",
        "RUSH_SELECT_EXCLUDE": "",
    }


def test_version():
    assert __version__


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(rush_select, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_quit_at_picker_exits_cleanly(make_workspace, tmp_path: Path) -> None:
    root = make_workspace({"app": {"build": "tsc"}})

    result = CliRunner().invoke(
        rush_select,
        ["--workspace-root", str(root)],
        input="q\n",
        env=_env(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert "Starting" not in result.output


def test_missing_workspace_is_reported(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        rush_select,
        ["--workspace-root", str(tmp_path)],
        env=_env(tmp_path),
    )

    assert result.exit_code == 1
    assert "No rush.json found" in result.output


def test_selected_script_runs_then_picker_returns(make_workspace, tmp_path: Path) -> None:
    script = "print('hello from app')"
    root = make_workspace({"app": {script: "unused"}})

    # Row 2 is the build group: turn it off; row 3 is the app project.
    result = CliRunner().invoke(
        rush_select,
        ["--workspace-root", str(root)],
        input=f"2\nignore\n3\n1\n\nq\n",
        env=_env(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert "Starting pre-scripts" in result.output
    assert "Starting main scripts" in result.output
    assert (tmp_path / "state" / "selections.json").is_file()


def test_failed_pre_script_exits_non_zero(make_workspace, tmp_path: Path) -> None:
    root = make_workspace({"app": {"build": "tsc"}})
    env = _env(tmp_path)
    env["RUSH_SELECT_WORKSPACE_TOOL"] = "definitely-not-an-installed-tool-xyz"

    result = CliRunner().invoke(
        rush_select,
        ["--workspace-root", str(root)],
        input="1\ninstall\n3\nbuild\n\n",
        env=env,
    )

    assert result.exit_code == 1
    assert "pre-scripts" in result.output
    assert "Starting main scripts" not in result.output
