"""CLI commands for storegate."""

import logging

import click
import yaml


@click.group()
@click.version_option(package_name="storegate")
def cli():
    """storegate - storage file delivery gateway."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=5001, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level (defaults to log_level from app.yaml)",
)
def serve(host, port, reload, workers, log_level):
    """Run the storage gateway server."""
    import uvicorn

    from storegate.config import get_settings

    settings = get_settings()
    level = (log_level or settings.log_level).lower()

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Each worker keeps its own response cache
    uvicorn.run(
        "storegate.asgi:app",
        host=host,
        port=port,
        reload=reload,
        workers=1 if reload else workers,
        log_level=level,
        server_header=False,
    )


@cli.command("show-config")
def show_config():
    """Print the resolved settings as YAML."""
    from storegate.config import get_settings

    settings = get_settings()
    click.echo(yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=False))


if __name__ == "__main__":
    cli()
