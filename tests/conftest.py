"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from rush_select.launcher.errors import SelectionAborted
from rush_select.launcher.models import PlannedScript, Selection
from rush_select.launcher.process import ProcessHandle
from rush_select.picker import PickerConfig
from rush_select.state import SavedSelection


class MemoryStore:
    """In-memory stand-in for SelectionStore."""

    def __init__(self, initial: dict[Path, list[SavedSelection]] | None = None) -> None:
        self.records: dict[Path, list[SavedSelection]] = dict(initial or {})
        self.saves: list[tuple[Path, list[SavedSelection]]] = []

    def load(self, root: Path) -> list[SavedSelection]:
        return list(self.records.get(root, []))

    def save(self, root: Path, selections: Sequence[SavedSelection]) -> None:
        self.records[root] = list(selections)
        self.saves.append((root, list(selections)))


class ScriptedPicker:
    """Returns queued selection lists; aborts once the queue is empty."""

    def __init__(self, *rounds: list[Selection] | BaseException) -> None:
        self.rounds = list(rounds)
        self.configs: list[PickerConfig] = []

    def run(self, config: PickerConfig) -> list[Selection]:
        self.configs.append(config)
        if not self.rounds:
            raise SelectionAborted
        item = self.rounds.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class FakeRunner:
    """Records spawn requests and returns handles resolved with configured codes."""

    def __init__(self, exit_codes: dict[str, int] | None = None) -> None:
        self.exit_codes = exit_codes or {}
        self.calls: list[tuple[str, ...]] = []

    def spawn_all(self, entries: Sequence[PlannedScript]) -> list[ProcessHandle]:
        self.calls.append(("spawn_all", *(f"{e.package_name}:{e.script}" for e in entries)))
        return [self._handle(f"{e.package_name}:{e.script}") for e in entries]

    def spawn(
        self,
        executable: str,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        label: str,
        prefix: str | None = None,
    ) -> ProcessHandle:
        self.calls.append(("spawn", executable, *args))
        return self._handle(label)

    def _handle(self, label: str) -> ProcessHandle:
        handle = ProcessHandle(label)
        handle.mark_exited(self.exit_codes.get(label, 0))
        return handle


@pytest.fixture()
def make_workspace(tmp_path: Path) -> Callable[..., Path]:
    """Write a rush.json workspace with one package.json per project."""

    def _make(projects: dict[str, dict[str, str]], *, header: str = "") -> Path:
        root = tmp_path / "repo"
        root.mkdir(parents=True, exist_ok=True)
        entries = []
        for package_name, scripts in projects.items():
            folder = f"packages/{package_name.split('/')[-1]}"
            entries.append({"packageName": package_name, "projectFolder": folder})
            project_dir = root / folder
            project_dir.mkdir(parents=True, exist_ok=True)
            (project_dir / "package.json").write_text(
                json.dumps({"name": package_name, "scripts": scripts}),
                "utf-8",
            )
        (root / "rush.json").write_text(
            header + json.dumps({"rushVersion": "5.100.0", "projects": entries}, indent=2),
            "utf-8",
        )
        return root

    return _make
