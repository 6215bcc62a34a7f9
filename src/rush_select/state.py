"""File-backed record of the last cycle's main-script selections."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

STATE_SCHEMA_VERSION = 1


@dataclass(frozen=True, slots=True)
class SavedSelection:
    """One persisted main-script choice."""

    package_name: str
    script: str


class SelectionStore:
    """Key-value store of selections keyed by absolute workspace root."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self, root: Path) -> list[SavedSelection]:
        """Return saved selections for ``root``; unreadable data counts as none."""

        workspaces = self._read_workspaces()
        raw_entries = workspaces.get(_root_key(root))
        if not isinstance(raw_entries, list):
            return []

        selections: list[SavedSelection] = []
        for raw in raw_entries:
            if not isinstance(raw, dict):
                continue
            package_name = raw.get("packageName")
            script = raw.get("script")
            if isinstance(package_name, str) and isinstance(script, str):
                selections.append(SavedSelection(package_name=package_name, script=script))
        return selections

    def save(self, root: Path, selections: Sequence[SavedSelection]) -> None:
        """Overwrite the record for ``root``, keeping other workspaces intact."""

        workspaces = self._read_workspaces()
        workspaces[_root_key(root)] = [
            {"packageName": item.package_name, "script": item.script} for item in selections
        ]
        payload = {"version": STATE_SCHEMA_VERSION, "workspaces": workspaces}

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            dir=self.path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2, sort_keys=True)
            Path(tmp_name).replace(self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved %d selection(s) for %s to %s", len(selections), root, self.path)

    def _read_workspaces(self) -> dict[str, Any]:
        try:
            payload = json.loads(self.path.read_text("utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as error:
            logger.warning("Ignoring unreadable selection file %s: %s", self.path, error)
            return {}

        if not isinstance(payload, dict) or not isinstance(payload.get("workspaces"), dict):
            logger.warning("Ignoring malformed selection file %s", self.path)
            return {}
        return dict(payload["workspaces"])


def _root_key(root: Path) -> str:
    return str(root.expanduser().resolve())
