"""Connectivity, synchronization and login commands."""

import asyncio

import click

from ..services import Notification, NotificationKind
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_notification,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
    open_services,
)


@click.command()
@click.pass_context
@async_command
async def status(ctx: click.Context):
    """Check the backend and show pending offline changes."""
    ensure_initialized(ctx)

    async with open_services(ctx, check=False) as services:
        available = await services.probe.check()
        pending = await services.queue.list_pending()

    click.echo()
    click.echo(click.style("Backend", bold=True))
    click.echo("=" * 50)
    click.echo(f"URL: {services.settings.health_url}")
    if available:
        click.echo(f"Status: {click.style('available', fg='green')}")
    else:
        click.echo(f"Status: {click.style('unavailable (using local data)', fg='yellow')}")
    if services.status.checked_at:
        click.echo(f"Checked: {services.status.checked_at.strftime('%Y-%m-%d %H:%M:%S')}")

    click.echo()
    if not pending:
        echo_info("No pending changes.")
        return

    click.echo(click.style(f"Pending changes ({len(pending)})", bold=True))
    rows = [
        [
            str(request.request_id),
            request.describe(),
            request.entity_ref.to_json() if request.entity_ref else "-",
            request.enqueued_at.strftime("%Y-%m-%d %H:%M"),
        ]
        for request in pending
    ]
    click.echo(format_table(["ID", "Request", "Entity", "Queued"], rows))
    if available:
        click.echo()
        echo_info("Run 'fitsync sync' to upload them.")


@click.command()
@click.option("--auto-sync", is_flag=True, help="Sync automatically when the backend comes back.")
@click.pass_context
@async_command
async def watch(ctx: click.Context, auto_sync: bool):
    """Monitor the backend until interrupted (Ctrl+C)."""
    ensure_initialized(ctx)

    async with open_services(ctx, check=False) as services:
        probe = services.probe

        async def on_notification(notification: Notification) -> None:
            await echo_notification(notification)
            if auto_sync and notification.kind == NotificationKind.SYNC_AVAILABLE:
                result = await services.sync.sync_all()
                (echo_success if result.success else echo_warning)(result.message)

        probe.add_listener(on_notification)
        echo_info(
            f"Watching {services.settings.api_base_url} every {probe.interval:g}s"
            + (" with auto-sync" if auto_sync else "")
        )
        try:
            await probe.run()
        except asyncio.CancelledError:
            probe.stop()
            echo_info("Stopped watching.")


@click.command()
@click.pass_context
@async_command
async def sync(ctx: click.Context):
    """Upload changes made while offline."""
    ensure_initialized(ctx)

    async with open_services(ctx, check=False) as services:
        result = await services.sync.sync_all()

    if result.success:
        echo_success(result.message)
        return

    echo_warning(result.message)
    for error in result.errors:
        click.echo(f"  - {error}")
    ctx.exit(1)


@click.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
@async_command
async def login(ctx: click.Context, email: str, password: str):
    """Log in and store the session token."""
    ensure_initialized(ctx)

    async with open_services(ctx) as services:
        response = await services.auth.login(email, password)
        token = response.data.get("token") if isinstance(response.data, dict) else None
        if not token:
            message = response.data.get("message") if isinstance(response.data, dict) else None
            echo_error(message or "Login failed.")
            ctx.exit(1)
        await services.set_token(token)

    user = response.data.get("user") or {}
    name = " ".join(filter(None, [user.get("first_name"), user.get("last_name")]))
    echo_success(f"Logged in as {name or email}")
    if response.is_fallback:
        echo_warning("Backend unavailable: using a demo session.")
