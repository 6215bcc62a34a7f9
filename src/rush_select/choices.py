"""Per-project picker choices, filtered by script name and seeded from saved state."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from rush_select.launcher.models import Project
from rush_select.state import SavedSelection


@dataclass(frozen=True, slots=True)
class ScriptFilter:
    """Include/exclude rules for script names; an empty include allows everything."""

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    def allows(self, script_name: str) -> bool:
        if self.include and script_name not in self.include:
            return False
        return script_name not in self.exclude


@dataclass(slots=True)
class Choice:
    """One selectable project row."""

    package_name: str
    scripts: tuple[str, ...]
    initial: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ChoiceSet:
    choices: list[Choice]
    all_script_names: list[str]


def create_choices(projects: Iterable[Project], script_filter: ScriptFilter) -> ChoiceSet:
    """Build rows for projects that have at least one allowed script."""

    choices: list[Choice] = []
    all_script_names: set[str] = set()
    for project in sorted(projects, key=lambda item: item.package_name):
        scripts = tuple(name for name in project.available_scripts if script_filter.allows(name))
        if not scripts:
            continue
        all_script_names.update(scripts)
        choices.append(Choice(package_name=project.package_name, scripts=scripts))
    return ChoiceSet(choices=choices, all_script_names=sorted(all_script_names))


def apply_saved_selections(
    choices: Sequence[Choice],
    saved: Iterable[SavedSelection],
    script_filter: ScriptFilter,
) -> None:
    """Pre-select saved scripts that are still offered for their project."""

    by_package = {choice.package_name: choice for choice in choices}
    for item in saved:
        choice = by_package.get(item.package_name)
        if choice is None or item.script not in choice.scripts:
            continue
        if not script_filter.allows(item.script) or item.script in choice.initial:
            continue
        choice.initial.append(item.script)
