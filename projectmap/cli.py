#!/usr/bin/env python3
"""CLI tool for projectmap operations."""

import asyncio
import json
import sys

import click
from rich.console import Console
from rich.table import Table

from .common import compute_signature, setup_logging
from .config import ProjectMapConfig
from .exceptions import ProjectMapError
from .feed import FeedRegenerator
from .models import ProjectRecord, create_store, project_key

console = Console()


def _load_config() -> ProjectMapConfig:
    return ProjectMapConfig.from_env().validate()


@click.group()
def cli():
    """Project map webhook ingestion and feed CLI."""
    pass


@cli.command()
@click.option("--host", default=None, help="Host to bind to (overrides PROJECTMAP_HOST)")
@click.option("--port", default=None, type=int, help="Port to bind to (overrides PROJECTMAP_PORT)")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def serve(host, port, reload):
    """Start the webhook and feed server."""
    try:
        config = _load_config()
        host = host or config.host
        port = port or config.port

        console.print("🚀 Starting project map server...")
        console.print(f"📡 Host: {host}")
        console.print(f"🔌 Port: {port}")
        console.print(f"🔄 Reload: {reload}")

        import uvicorn
        uvicorn.run(
            "projectmap.server:create_app",
            factory=True,
            host=host,
            port=port,
            reload=reload,
            log_level="info"
        )

    except KeyboardInterrupt:
        console.print("⏹️  Server stopped by user")
    except Exception as e:
        console.print(f"❌ Server failed: {e}", style="red")
        sys.exit(1)


@cli.command()
def config():
    """Show current configuration."""
    try:
        config = _load_config()

        table = Table(title="Project Map Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Webhook Secret", "*" * len(config.webhook_secret) if config.webhook_secret else "Not set")
        table.add_row("Webhook Endpoint", config.webhook_endpoint)
        table.add_row("Signature Header", config.signature_header)
        table.add_row("Signature", f"{config.signature_algorithm}/{config.signature_encoding}")
        table.add_row("Require Signature", str(config.require_signature))
        table.add_row("Map Label", config.map_label or "(none, publish all)")
        table.add_row("Jitter", f"{config.jitter_meters}m")
        table.add_row("Feed Max-Age", f"{config.feed_max_age}s")
        table.add_row("Store", config.store_backend)
        table.add_row("Redis URL", config.redis_url)
        table.add_row("Host", config.host)
        table.add_row("Port", str(config.port))
        table.add_row("Log Directory", str(config.log_dir))

        console.print(table)

    except ProjectMapError as e:
        console.print(f"❌ Failed to load configuration: {e}", style="red")
        sys.exit(1)


@cli.command()
def regenerate():
    """Rebuild the cached feed from all stored records."""
    try:
        config = _load_config()
        setup_logging(config.log_dir)
        store = create_store(config.store_backend, config.redis_url)

        async def run() -> None:
            try:
                await FeedRegenerator(store).regenerate()
            finally:
                await store.close()

        console.print("🔄 Regenerating feed...")
        asyncio.run(run())
        console.print("✅ Feed regenerated")

    except ProjectMapError as e:
        console.print(f"❌ Error regenerating feed: {e}", style="red")
        sys.exit(1)


@cli.command("show-record")
@click.argument("project_id")
def show_record(project_id):
    """Show the stored record for a project id."""
    try:
        config = _load_config()
        store = create_store(config.store_backend, config.redis_url)

        async def fetch():
            try:
                return await store.get(project_key(project_id))
            finally:
                await store.close()

        raw = asyncio.run(fetch())
        if raw is None:
            console.print(f"❌ No record stored for project {project_id}")
            sys.exit(1)

        record = ProjectRecord.model_validate_json(raw)
        table = Table(title=f"Project {record.id}")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        for name, value in record.model_dump(mode="json").items():
            table.add_row(name, json.dumps(value) if isinstance(value, list) else str(value))
        console.print(table)

    except ProjectMapError as e:
        console.print(f"❌ Error reading record: {e}", style="red")
        sys.exit(1)


@cli.command()
@click.argument("body_file", type=click.File("rb"))
def sign(body_file):
    """Print the signature header value for a webhook body file."""
    try:
        config = _load_config()
        if not config.webhook_secret:
            console.print("❌ COMPANYCAM_WEBHOOK_TOKEN is not set", style="red")
            sys.exit(1)

        signature = compute_signature(
            body_file.read(),
            config.webhook_secret,
            config.signature_algorithm,
            config.signature_encoding,
        )
        click.echo(f"{config.signature_header}: {signature}")

    except ProjectMapError as e:
        console.print(f"❌ Failed to load configuration: {e}", style="red")
        sys.exit(1)


if __name__ == "__main__":
    cli()
