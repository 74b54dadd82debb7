"""User preference commands."""

import click

from ..errors import ValidationError
from ..services.preferences import LANGUAGES, UNIT_SYSTEMS
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized, open_services


@click.group()
def prefs():
    """Show or change user preferences."""
    pass


@prefs.command("show")
@click.pass_context
@async_command
async def show(ctx: click.Context):
    """Show the stored preferences."""
    ensure_initialized(ctx)

    async with open_services(ctx, check=False) as services:
        current = await services.preferences.load()

    click.echo(f"Notifications: {'on' if current.notifications else 'off'}")
    click.echo(f"Dark mode:     {'on' if current.dark_mode else 'off'}")
    click.echo(f"Language:      {current.language}")
    click.echo(f"Units:         {current.units}")


@prefs.command("set")
@click.option("--notifications/--no-notifications", default=None)
@click.option("--dark-mode/--no-dark-mode", default=None)
@click.option("--language", type=click.Choice(LANGUAGES), default=None)
@click.option("--units", type=click.Choice(UNIT_SYSTEMS), default=None)
@click.pass_context
@async_command
async def set_prefs(ctx: click.Context, **options):
    """Change preferences; the change is synced to the backend later."""
    ensure_initialized(ctx)

    changes = {name: value for name, value in options.items() if value is not None}
    if not changes:
        echo_info("Nothing to change.")
        return

    async with open_services(ctx, check=False) as services:
        try:
            await services.preferences.save(**changes)
        except ValidationError as e:
            echo_error(str(e))
            ctx.exit(1)

    echo_success(f"Saved {', '.join(sorted(changes))}")
    echo_info("Run 'fitsync sync' to send them to the backend.")
