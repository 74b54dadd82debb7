"""Initialize project command."""

import click

from ..db import CacheRepository, PendingRequestRepository, init_db
from ..services import PreferencesService
from .base import async_command, echo_info, echo_success, get_state


@click.command()
@click.pass_context
@async_command
async def init(ctx: click.Context):
    """Initialize the fitsync data directory and database.

    This creates the data directory, the SQLite cache and the default
    user preferences.
    """
    settings = get_state(ctx).settings
    data_dir = settings.data_dir

    echo_info(f"Initializing fitsync in {data_dir}")
    data_dir.mkdir(parents=True, exist_ok=True)

    await init_db(settings.db_path)
    echo_success("Database initialized")

    prefs = PreferencesService(
        CacheRepository(settings.db_path),
        PendingRequestRepository(settings.db_path),
        settings.default_user_id,
    )
    await prefs.initialize()
    echo_success("Default preferences written")

    click.echo()
    click.echo("fitsync is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Check the backend connection:")
    click.echo("     fitsync status")
    click.echo()
    click.echo("  2. Browse your plans or talk to the coach:")
    click.echo("     fitsync plans list")
    click.echo('     fitsync chat "Quiero un plan de fuerza de 3 días"')
