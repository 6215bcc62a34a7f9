"""CLI entrypoint for rush-select."""

from pathlib import Path

import rich_click as click

from rush_select import __version__
from rush_select.config import ConfigurationError
from rush_select.launcher.controllers import LaunchCommand, LauncherCliController
from rush_select.launcher.errors import PhaseFailedError
from rush_select.workspace import WorkspaceError

click.rich_click.USE_MARKDOWN = True
LAUNCHER_CONTROLLER = LauncherCliController()


@click.command()
@click.version_option(version=__version__, prog_name="rush-select")
@click.option(
    "--include",
    "include",
    multiple=True,
    help="Only offer this script name. Can be repeated.",
)
@click.option(
    "--exclude",
    "exclude",
    multiple=True,
    help="Never offer this script name. Can be repeated.",
)
@click.option(
    "--workspace-root",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Workspace directory containing rush.json. Defaults to searching upward from cwd.",
)
def rush_select(
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    workspace_root: Path | None,
) -> None:
    """Pick scripts per project and run them.

    Pre-scripts (`rush install`/`rush update`) run first, one at a time, then
    the optional `rush build` step, then every selected project script in
    parallel. Selections are remembered for the next start.
    """

    try:
        LAUNCHER_CONTROLLER.launch(
            LaunchCommand(
                include=include,
                exclude=exclude,
                workspace_root=workspace_root,
            ),
        )
    except (PhaseFailedError, WorkspaceError) as error:
        raise click.ClickException(str(error)) from error
    except ConfigurationError as error:
        raise click.ClickException(f"Invalid configuration: {error}") from error


if __name__ == "__main__":  # pragma: no cover
    rush_select()
