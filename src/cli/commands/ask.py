"""Dry-run the answer pipeline from the terminal."""

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from cli.utils import run_with_components

console = Console()


@click.command()
@click.argument("message")
@click.option("--show-context", is_flag=True, help="Print the knowledge context sent to the model")
def ask(message: str, show_context: bool):
    """Answer MESSAGE with the knowledge base, ignoring conversation mode."""

    async def _ask(c):
        snapshot = await c.knowledge_cache.get()
        result = await c.generator.generate(message, snapshot.combined_context)
        return snapshot, result

    with console.status("Thinking..."):
        snapshot, result = run_with_components(_ask)

    if show_context:
        console.print(Panel(snapshot.combined_context, title="Context", border_style="dim"))

    console.print()
    console.print(Markdown(result.text))
    console.print()

    style = "red" if result.provider_used.value == "none" else "green"
    console.print(
        f"[{style}]{result.provider_used.value}[/] · model [bold]{result.model}[/]"
        f" · {len(snapshot.documents)} pages · {result.latency_ms:.0f} ms"
    )
    for error in result.errors:
        console.print(f"[yellow]provider error:[/] {error}")
