"""Conversation mode (AI / Human handover) CLI commands."""

import asyncio

import click
from rich.console import Console
from rich.table import Table

from bot.modes import ConversationModeStore, Mode
from bot.session_store import SessionRepository
from cli.utils import get_config

console = Console()


def _get_store() -> ConversationModeStore:
    config = get_config()
    return ConversationModeStore(SessionRepository(config.paths.sessions_db))


@click.group()
def sessions():
    """Manage per-conversation AI/Human mode."""
    pass


@sessions.command("list")
@click.option("--mode", "mode", default="Human", show_default=True,
              type=click.Choice([m.value for m in Mode]), help="Mode to list")
def sessions_list(mode: str):
    """List conversations in a mode, most recently active first."""
    states = asyncio.run(_get_store().list_by_mode(mode))
    if not states:
        console.print(f"[yellow]No conversations in {mode} mode.[/]")
        return

    table = Table(title=f"{mode} mode conversations")
    table.add_column("Conversation")
    table.add_column("Last active", style="dim")
    for state in states:
        table.add_row(state.conversation_id, state.last_active.strftime("%Y-%m-%d %H:%M:%S %Z"))
    console.print(table)


@sessions.command("set")
@click.argument("conversation_id")
@click.argument("mode", type=click.Choice([m.value for m in Mode]))
def sessions_set(conversation_id: str, mode: str):
    """Set CONVERSATION_ID to MODE."""
    state = asyncio.run(_get_store().set_mode(conversation_id, mode))
    console.print(f"[green]✓[/] {state.conversation_id} → {state.mode.value}")


@sessions.command("toggle")
@click.argument("conversation_id")
def sessions_toggle(conversation_id: str):
    """Flip CONVERSATION_ID between AI and Human."""
    state = asyncio.run(_get_store().toggle(conversation_id))
    console.print(f"[green]✓[/] {state.conversation_id} → {state.mode.value}")
