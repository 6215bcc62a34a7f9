"""Interactive terminal picker rendered with rich."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, TextIO

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from rush_select.choices import Choice
from rush_select.launcher.errors import SelectionAborted
from rush_select.launcher.models import IGNORE_SCRIPT, ExecutionGroup, Selection

DEFAULT_MESSAGE = (
    "Select what to run. Type a row number to change its scripts, "
    "press Enter to start, q to quit."
)
_QUIT_ANSWERS = frozenset({"q", "quit", "exit"})


@dataclass(slots=True)
class PickerConfig:
    """Everything the picker needs to render one selection round."""

    groups: Sequence[ExecutionGroup]
    choices: Sequence[Choice]
    all_script_names: Sequence[str] = ()
    message: str = DEFAULT_MESSAGE


class SelectionPicker(Protocol):
    """Yields the operator's selections or raises SelectionAborted."""

    def run(self, config: PickerConfig) -> list[Selection]:
        """Return one or more selections per row, skipped rows included."""


@dataclass(slots=True)
class PickerRow:
    """Editable row state: an execution group or a project."""

    name: str
    title: str
    options: tuple[str, ...]
    allow_multiple: bool = True
    selected: list[str] = field(default_factory=list)
    group: ExecutionGroup | None = None

    def to_selections(self) -> list[Selection]:
        if not self.selected:
            return [Selection(package_name=self.name, script=None)]
        if self.group is None:
            return [Selection(package_name=self.name, script=script) for script in self.selected]
        return [
            Selection(
                package_name=self.name,
                script=script,
                script_executable=self.group.script_executable,
                script_command=self.group.script_command,
            )
            for script in self.selected
        ]


def build_rows(config: PickerConfig) -> list[PickerRow]:
    """Groups first, ordered by sort key, then one row per project choice."""

    rows: list[PickerRow] = []
    for group in sorted(config.groups, key=lambda item: item.sort_key):
        options = tuple(name for name in group.script_names if name != IGNORE_SCRIPT)
        initial = (
            group.script_names[group.initial]
            if 0 <= group.initial < len(group.script_names)
            else IGNORE_SCRIPT
        )
        rows.append(
            PickerRow(
                name=group.name,
                title=group.category,
                options=options,
                allow_multiple=group.allow_multiple_scripts,
                selected=[] if initial == IGNORE_SCRIPT else [initial],
                group=group,
            ),
        )
    for choice in config.choices:
        rows.append(
            PickerRow(
                name=choice.package_name,
                title=choice.package_name,
                options=choice.scripts,
                selected=list(choice.initial),
            ),
        )
    return rows


class RichPicker:
    """Table-and-prompt picker; Enter starts the run, q aborts it."""

    def __init__(self, console: Console | None = None, stream: TextIO | None = None) -> None:
        self.console = console or Console()
        self.stream = stream

    def run(self, config: PickerConfig) -> list[Selection]:
        rows = build_rows(config)
        while True:
            self.console.print(render_table(rows, config.message, config.all_script_names))
            answer = self._ask("Row", default="").strip()
            if not answer:
                return [selection for row in rows for selection in row.to_selections()]
            if answer.lower() in _QUIT_ANSWERS:
                raise SelectionAborted
            row = _find_row(rows, answer)
            if row is None:
                self.console.print(f"[red]No such row: {escape(answer)}[/red]")
                continue
            self._edit(row)

    def _edit(self, row: PickerRow) -> None:
        hint = "comma-separated" if row.allow_multiple else "one"
        answer = self._ask(
            f"Scripts for {escape(row.title)} "
            f"({hint}; names or numbers, {IGNORE_SCRIPT} for none)",
            default=", ".join(row.selected) or IGNORE_SCRIPT,
        )
        try:
            row.selected = parse_scripts(answer, row.options, allow_multiple=row.allow_multiple)
        except ValueError as error:
            self.console.print(f"[red]{escape(str(error))}[/red]")

    def _ask(self, prompt: str, *, default: str) -> str:
        try:
            return Prompt.ask(
                prompt,
                console=self.console,
                default=default,
                show_default=bool(default),
                stream=self.stream,
            )
        except (KeyboardInterrupt, EOFError) as error:
            raise SelectionAborted from error


def parse_scripts(answer: str, options: Sequence[str], *, allow_multiple: bool) -> list[str]:
    """Turn a comma-separated answer into script names; numbers index ``options`` from 1."""

    picked: list[str] = []
    for token in (part.strip() for part in answer.split(",")):
        if not token or token == IGNORE_SCRIPT:
            continue
        if token.isdecimal():
            index = int(token)
            if index == 0:
                continue
            if index > len(options):
                raise ValueError(f"No script number {index}")
            token = options[index - 1]
        elif token not in options:
            raise ValueError(f"Unknown script: {token}")
        if token not in picked:
            picked.append(token)
    if len(picked) > 1 and not allow_multiple:
        raise ValueError("Only one script can be selected for this row")
    return picked


def render_table(
    rows: Sequence[PickerRow],
    message: str,
    script_names: Sequence[str] = (),
) -> Table:
    table = Table(
        title=message,
        title_justify="left",
        caption=f"Scripts: {', '.join(script_names)}" if script_names else None,
        caption_justify="left",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Row")
    table.add_column("Selected", style="green")
    table.add_column("Options", style="grey50")
    for number, row in enumerate(rows, start=1):
        options = ", ".join(
            f"{index} {name}" for index, name in enumerate((IGNORE_SCRIPT, *row.options))
        )
        table.add_row(
            str(number),
            escape(row.title),
            escape(", ".join(row.selected)) or f"[dim]{IGNORE_SCRIPT}[/dim]",
            escape(options),
        )
    return table


def _find_row(rows: Sequence[PickerRow], answer: str) -> PickerRow | None:
    if answer.isdecimal():
        index = int(answer)
        return rows[index - 1] if 1 <= index <= len(rows) else None
    for row in rows:
        if row.name == answer:
            return row
    return None
