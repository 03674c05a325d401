"""CLI entry point."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from wildspine.core.config import get_settings
from wildspine.core.logging import configure_logging

app = typer.Typer(
    name="wildspine",
    help="Wildlife sighting ingestion and notification service",
    no_args_is_help=True,
)
console = Console()


@app.command()
def version() -> None:
    """Show version."""
    from wildspine import __version__

    console.print(f"wildspine {__version__}")


@app.command()
def info() -> None:
    """Show system information and effective settings."""
    import sys

    from wildspine import __version__

    settings = get_settings()
    console.print(f"[bold]WildSpine[/bold] {__version__}")
    console.print(f"Python {sys.version}")
    console.print(f"Storage: {settings.storage_backend}")
    console.print(f"Queue: {settings.queue_backend} ({settings.queue_name})")
    console.print(f"Dedup threshold: {settings.dedup_threshold_km:g} km")
    attempts = settings.redelivery_max_attempts or "unbounded"
    console.print(f"Redelivery: {attempts}, base delay {settings.redelivery_base_delay:g}s")


@app.command("init-db")
def init_db() -> None:
    """Create repository and queue tables."""
    from wildspine.core.runtime import Runtime

    settings = get_settings()
    configure_logging(settings)

    async def _run() -> None:
        runtime = Runtime(settings)
        await runtime.initialize(start_consumer=False)
        await runtime.close()

    asyncio.run(_run())
    console.print("[green]Schema ready[/green]")


@app.command()
def consume() -> None:
    """Run the notification consumer until interrupted."""
    from wildspine.core.runtime import Runtime

    settings = get_settings()
    configure_logging(settings)

    async def _run() -> None:
        runtime = Runtime(settings)
        await runtime.initialize(start_consumer=False)
        try:
            await runtime.consumer.consume(runtime.handler)
        finally:
            await runtime.close()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("Consumer stopped")


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Bind address"),
    port: int | None = typer.Option(None, help="Bind port"),
) -> None:
    """Serve the HTTP API with an in-process consumer."""
    import uvicorn

    from wildspine.api.fastapi import create_app
    from wildspine.core.runtime import Runtime

    settings = get_settings()
    configure_logging(settings)

    uvicorn.run(
        create_app(Runtime(settings)),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    app()
