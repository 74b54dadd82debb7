"""Chat with the AI coach."""

import click
import questionary
from questionary import Style

from ..chat import ChatBridge, ChatResult
from .base import async_command, echo_info, echo_warning, ensure_initialized, open_services

custom_style = Style(
    [
        ("qmark", "fg:#673ab7 bold"),
        ("question", "bold"),
        ("answer", "fg:#f44336 bold"),
    ]
)

EXIT_WORDS = {"salir", "exit", "quit"}


def _show(result: ChatResult) -> None:
    click.echo()
    click.echo(click.style("Coach: ", fg="cyan", bold=True) + result.message)
    for outcome in result.actions:
        if not outcome.success:
            continue
        note = f"{outcome.type} done"
        if outcome.source != "live":
            note += " (saved locally, pending sync)"
        echo_info(note)
    click.echo()


async def _interactive(bridge: ChatBridge) -> None:
    click.echo("Chatting with the coach. Type 'salir' or press Enter on an empty line to quit.")
    while True:
        message = await questionary.text("Tú:", style=custom_style).ask_async()
        if not message or message.strip().lower() in EXIT_WORDS:
            break
        _show(await bridge.send(message))


@click.command()
@click.argument("message", required=False)
@click.pass_context
@async_command
async def chat(ctx: click.Context, message: str | None):
    """Talk to the AI coach.

    With MESSAGE, sends it once and prints the reply. Without it, starts
    an interactive conversation. Plans and logs the coach creates are
    stored like any other change.
    """
    ensure_initialized(ctx)

    async with open_services(ctx) as services:
        if message:
            result = await services.chat.send(message)
            _show(result)
            if result.failed:
                echo_warning("The coach is unavailable right now.")
                ctx.exit(1)
            return
        await _interactive(services.chat)
