"""Shared CLI utilities."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import wraps
from typing import Any, AsyncIterator

import click
import httpx

from ..config import Settings
from ..models.identifiers import PersistedId, TemporaryId, parse_entity_id
from ..services import Notification, NotificationKind, ServiceRegistry


@dataclass
class CliContext:
    """Object stored on the root click context."""

    settings: Settings | None = None
    transport: httpx.AsyncBaseTransport | None = None  # tests plug a fake backend in here
    chat_transport: httpx.AsyncBaseTransport | None = None


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def get_state(ctx: click.Context) -> CliContext:
    return ctx.find_object(CliContext)


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    if not get_state(ctx).settings.db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'fitsync init' first."
        )
        ctx.exit(1)


async def echo_notification(notification: Notification) -> None:
    """Print a probe notification."""
    if notification.kind == NotificationKind.SYNC_AVAILABLE:
        echo_info(f"{notification.message}. Run 'fitsync sync' to upload them.")
    else:
        echo_warning(notification.message)


@asynccontextmanager
async def open_services(ctx: click.Context, check: bool = True) -> AsyncIterator[ServiceRegistry]:
    """Build the service registry for a command.

    Args:
        ctx: Click context carrying the CliContext
        check: Run one availability check first, like the app does on start
    """
    state = get_state(ctx)
    async with ServiceRegistry(
        state.settings, transport=state.transport, chat_transport=state.chat_transport
    ) as services:
        if check:
            services.probe.add_listener(echo_notification)
            await services.probe.check()
        yield services


def format_id(raw: Any) -> str:
    """Render an entity id for display (temporary ids get a tmp: prefix)."""
    try:
        parsed = parse_entity_id(raw)
    except ValueError:
        return str(raw)
    if isinstance(parsed, TemporaryId):
        return f"tmp:{parsed.local_id}"
    if isinstance(parsed, PersistedId):
        return str(parsed.server_id)
    return "-"


def parse_id_arg(text: str) -> Any:
    """Inverse of format_id for command arguments."""
    if text.startswith("tmp:") and text[4:].isdigit():
        return TemporaryId(int(text[4:])).to_json()
    if text.isdigit():
        return int(text)
    raise click.BadParameter(f"{text!r} is not a plan id")


def source_label(source: str) -> str:
    if source == "live":
        return click.style("live", fg="green")
    if source == "cache":
        return click.style("local cache", fg="yellow")
    return click.style("demo data", fg="yellow")


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = ["".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers))]
    lines.append("".join("-" * w + " " * padding for w in widths))
    for row in rows:
        lines.append("".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row)))

    return "\n".join(line.rstrip() for line in lines)
