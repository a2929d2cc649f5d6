"""CLI entry point for the helpdesk bot."""

import sys
from pathlib import Path

import click

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cli.commands import ask, knowledge, serve, sessions
from cli.logging_config import setup_logging
from cli.utils import get_config


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Helpdesk bot - knowledge-grounded answers for LINE."""
    config = get_config()
    level = "DEBUG" if verbose else config.logging.level
    setup_logging(json_mode=config.logging.json_mode, level=level)


cli.add_command(ask)
cli.add_command(knowledge)
cli.add_command(serve)
cli.add_command(sessions)


if __name__ == "__main__":
    cli()
