"""CLI entrypoint for ralph."""

from __future__ import annotations

import sys
from pathlib import Path

import rich_click as click

from ralph_loop import __version__
from ralph_loop.controllers import InitCommand, RalphCliController, RalphCliError, RunCommand
from ralph_loop.loop import FatalRunError
from ralph_loop.provisioner import ProvisionError

click.rich_click.USE_MARKDOWN = True


@click.command()
@click.version_option(version=__version__, prog_name="ralph")
@click.option(
    "--init",
    "init_mode",
    is_flag=True,
    default=False,
    help="Initialize the `ralph/` directory with config and templates.",
)
@click.option(
    "--tool",
    default=None,
    help="Tool to scaffold for (required for `--init`): amp, claude, or copilot.",
)
@click.option(
    "--max-iterations",
    type=int,
    default=0,
    show_default=False,
    help="Maximum number of iterations (overrides config).",
)
@click.argument("legacy_max_iterations", nargs=-1)
def ralph(
    init_mode: bool,
    tool: str | None,
    max_iterations: int,
    legacy_max_iterations: tuple[str, ...],
) -> None:
    """Run an AI coding assistant in a loop until it prints the completion marker."""

    controller = RalphCliController(emit=click.echo)
    project_root = Path.cwd()
    try:
        if init_mode:
            controller.init(InitCommand(project_root=project_root, tool=tool))
            return
        result = controller.run(
            RunCommand(
                project_root=project_root,
                max_iterations=_effective_max_iterations(
                    max_iterations,
                    legacy_max_iterations[0] if legacy_max_iterations else None,
                ),
            ),
        )
    except RalphCliError as error:
        raise click.ClickException(error.render()) from error
    except (FatalRunError, ProvisionError) as error:
        raise click.ClickException(str(error)) from error
    sys.exit(result.exit_code)


def _effective_max_iterations(flag_value: int, positional: str | None) -> int | None:
    """`--max-iterations` wins; the bare positional count is kept for old scripts.

    Only the first positional is read; any further ones are ignored.
    """

    if flag_value > 0:
        return flag_value
    if positional is None:
        return None
    try:
        return int(positional)
    except ValueError:
        return None


if __name__ == "__main__":  # pragma: no cover
    ralph()
