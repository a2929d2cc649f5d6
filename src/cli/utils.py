"""Shared CLI utilities."""

import asyncio
import sys

from rich.console import Console

console = Console()


def get_config():
    """Load config, exiting with a readable message when it is invalid."""
    from cli.config import load_config_model

    try:
        return load_config_model()
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)


def get_components(config=None):
    """Build the answer pipeline from config."""
    from bot.components import build_components

    return build_components(config or get_config())


def run_with_components(func, config=None):
    """Run ``await func(components)`` and close network clients afterwards."""

    async def _runner():
        components = get_components(config)
        try:
            return await func(components)
        finally:
            await components.aclose()

    return asyncio.run(_runner())
