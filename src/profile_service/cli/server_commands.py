"""Server, seeding and configuration CLI commands."""

import httpx
import typer
from rich.console import Console
from rich.progress import Progress
from rich.syntax import Syntax

from src.profile_service.runtime.context import get_config

console = Console()


def serve_command(
    host: str | None = typer.Option(None, help="Host to bind (defaults to config)"),
    port: int | None = typer.Option(None, help="Port to bind (defaults to config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    config = get_config()
    host = host or config.app.host
    port = port or config.app.port
    console.print(f"[blue]Server will be available at:[/blue] http://{host}:{port}")
    uvicorn.run(
        "src.profile_service.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        access_log=False,  # Request logging is done by our middleware
    )


def build_seed_payload(index: int) -> dict[str, str]:
    return {
        "username": f"user{index}",
        "email": f"user{index}@example.com",
        "bio": (
            f"This is user {index} with some bio content that might be "
            "long enough to cause processing delays."
        ),
    }


def seed_command(
    count: int = typer.Option(100, "--count", "-n", min=1, help="Profiles to create"),
    base_url: str | None = typer.Option(
        None, "--base-url", help="Service URL (defaults to the configured host/port)"
    ),
    start: int = typer.Option(1, help="First index used in generated usernames"),
) -> None:
    """Create generated profiles through the running service's HTTP API."""
    base_url = base_url or get_config().app.base_url
    created = 0
    failed: list[tuple[int, int]] = []

    with httpx.Client(base_url=base_url, timeout=10) as client, Progress() as progress:
        task = progress.add_task("Seeding profiles", total=count)
        for index in range(start, start + count):
            try:
                response = client.post("/users", json=build_seed_payload(index))
            except httpx.HTTPError as e:
                console.print(f"[red]❌ Could not reach {base_url}: {e}[/red]")
                raise typer.Exit(code=1) from e
            if response.status_code == 201:
                created += 1
            else:
                failed.append((index, response.status_code))
            progress.advance(task)

    console.print(f"[green]Created {created} profiles[/green]")
    for index, status in failed:
        console.print(f"[yellow]user{index}: HTTP {status}[/yellow]")


def config_command() -> None:
    """Print the effective configuration (password masked)."""
    import yaml

    config = get_config()
    data = config.model_dump()
    if data["database"].get("password"):
        data["database"]["password"] = "***"
    console.print(Syntax(yaml.safe_dump({"config": data}, sort_keys=False), "yaml"))
