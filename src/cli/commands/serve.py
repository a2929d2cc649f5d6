"""Run the webhook + admin API server."""

import click


@click.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (development)")
def serve(host: str, port: int, reload: bool):
    """Start the FastAPI server."""
    import uvicorn

    uvicorn.run("web.app:app", host=host, port=port, reload=reload, log_config=None)
