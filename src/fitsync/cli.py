"""CLI entry point for fitsync."""

from pathlib import Path

import click

from . import __version__
from .commands import chat, exercises, init, login, nutrition, plans, prefs, progress, status, sync, watch
from .commands.base import CliContext, echo_error
from .config import load_settings
from .errors import ConfigError
from .logging_setup import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="fitsync")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to fitsync.yaml",
)
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, log_level: str | None):
    """fitsync: offline-first fitness coaching client.

    Workout plans, nutrition plans and progress are served from the
    backend when it is reachable and from a local cache otherwise.
    Changes made offline are queued and uploaded with 'fitsync sync'.

    Example usage:

        # Initialize the local cache
        fitsync init

        # Check the backend and pending changes
        fitsync status

        # Log today's weight (works offline)
        fitsync progress log --weight 75

        # Upload offline changes
        fitsync sync
    """
    state = ctx.ensure_object(CliContext)
    try:
        state.settings = load_settings(config_path)
    except ConfigError as e:
        echo_error(str(e))
        ctx.exit(1)

    configure_logging(log_level or state.settings.log_level, state.settings.log_format)


# Register commands
main.add_command(init)
main.add_command(status)
main.add_command(watch)
main.add_command(sync)
main.add_command(login)
main.add_command(plans)
main.add_command(nutrition)
main.add_command(progress)
main.add_command(exercises)
main.add_command(chat)
main.add_command(prefs)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
