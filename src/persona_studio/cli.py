"""Command-line interface using Typer."""

import typer
from rich.console import Console
from rich.table import Table

from persona_studio import __version__
from persona_studio.logging import setup_logging

# Setup logging
setup_logging()

app = typer.Typer(
    name="persona-studio",
    help="Persona Studio - AI persona content generation CLI",
    add_completion=False,
)

console = Console()


@app.command()
def version() -> None:
    """Show version and exit."""
    console.print(f"Persona Studio v{__version__}")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    from persona_studio.config import settings

    uvicorn.run(
        "persona_studio.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload or settings.api_reload,
    )


@app.command("init-db")
def init_db_command() -> None:
    """Create any missing database tables."""
    from persona_studio.db.session import init_db

    try:
        init_db()
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1)
    console.print("[bold green]✓ Database ready[/bold green]")


@app.command()
def sweep() -> None:
    """Publish all due scheduled content once."""
    from persona_studio.db.repository import ContentRepository
    from persona_studio.services.providers import get_publisher_handlers
    from persona_studio.services.publisher import PublisherDispatcher
    from persona_studio.services.scheduler import ScheduledPublisher
    from persona_studio.utils.async_utils import run_async

    publisher = ScheduledPublisher(
        ContentRepository(), PublisherDispatcher(get_publisher_handlers())
    )
    report = run_async(publisher.sweep())

    table = Table(title="Scheduled Publish Sweep")
    table.add_column("Due", justify="right")
    table.add_column("Published", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_row(str(report.due), str(report.published), str(report.failed))
    console.print(table)

    if report.error:
        console.print(f"[bold red]Sweep failed: {report.error}[/bold red]")
        raise typer.Exit(code=1)


@app.command()
def worker() -> None:
    """Start a Celery worker (for development)."""
    console.print("[bold blue]Starting Celery worker...[/bold blue]")

    import subprocess
    import sys

    subprocess.run(
        [
            sys.executable,
            "-m",
            "celery",
            "-A",
            "persona_studio.worker",
            "worker",
            "--beat",
            "--loglevel=info",
            "-Q",
            "default,publish",
        ],
        check=True,
    )


if __name__ == "__main__":
    app()
