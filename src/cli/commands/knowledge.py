"""Knowledge base CLI commands."""

import sys

import click
import httpx
from rich.console import Console
from rich.table import Table

from cli.utils import run_with_components

console = Console()


@click.group()
def knowledge():
    """Inspect and refresh the Notion knowledge cache."""
    pass


@knowledge.command("show")
@click.option("--full", is_flag=True, help="Print the combined context too")
def knowledge_show(full: bool):
    """Fetch all configured pages and summarize them."""

    async def _fill(c):
        return c.config.knowledge.page_ids, await c.knowledge_cache.get()

    with console.status("Fetching pages..."):
        page_ids, snapshot = run_with_components(_fill)

    if not page_ids:
        console.print("[yellow]No pages configured. Set NOTION_PAGE_IDS or knowledge.page_ids.[/]")
        return

    table = Table(title=f"Knowledge pages ({len(snapshot.documents)}/{len(page_ids)} fetched)")
    table.add_column("Page ID", style="dim")
    table.add_column("Title")
    table.add_column("Chars", justify="right")

    fetched = {doc.identifier: doc for doc in snapshot.documents}
    for page_id in page_ids:
        doc = fetched.get(page_id)
        if doc is None:
            table.add_row(page_id, "[red]fetch failed[/]", "-")
        else:
            table.add_row(page_id, doc.display_title, str(len(doc.content)))
    console.print(table)

    if full:
        console.print(snapshot.combined_context)


@knowledge.command("refresh")
@click.option("--url", default="http://localhost:8000", show_default=True,
              help="Base URL of the running bot server")
@click.option("--warm", is_flag=True, help="Refill immediately")
def knowledge_refresh(url: str, warm: bool):
    """Invalidate the running server's knowledge cache."""
    try:
        response = httpx.post(
            f"{url.rstrip('/')}/api/admin/knowledge/refresh",
            params={"warm": str(warm).lower()},
            timeout=120.0,
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        console.print(f"[red]Refresh failed:[/] {e}")
        sys.exit(1)

    data = response.json()
    console.print(f"[green]✓[/] Cache '{data['tag']}' invalidated (generation {data['generation']})")
    for title in data.get("pages") or []:
        console.print(f"  • {title}")
