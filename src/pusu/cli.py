"""Typer CLI for provisioning and serving push subscriptions."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any

import structlog
import typer
from rich.console import Console
from rich.table import Table

from pusu.adapter import create_adapter
from pusu.config.loader import load_config
from pusu.config.models import AdapterConfig
from pusu.errors import PusuError
from pusu.logging_config import configure_logging
from pusu.subscription import Message, Subscription

logger = structlog.get_logger()
console = Console()
app = typer.Typer(name="pusu", help="Pub/Sub push subscription adapter")


def _load(config_path: str | None) -> AdapterConfig:
    if config_path is not None and not Path(config_path).exists():
        console.print(f"[red]Config file not found: {config_path}[/red]")
        raise typer.Exit(1)
    try:
        config = load_config(config_path)
    except (ValueError, TypeError) as exc:
        console.print(f"[red]Invalid config:[/red] {exc}")
        raise typer.Exit(1) from exc
    configure_logging(config.log_level, json_logs=config.json_logs)
    return config


def import_handler(ref: str) -> Any:
    """Resolve a ``package.module:attribute`` reference to a handler."""
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        msg = f"Handler reference '{ref}' must look like 'module:attribute'"
        raise ValueError(msg)
    module = importlib.import_module(module_name)
    target: Any = module
    for part in attr.split("."):
        target = getattr(target, part)
    return target


def _noop(message: Message) -> None:
    return None


@app.command()
def validate(
    config_path: str | None = typer.Option(None, "--config", help="Adapter YAML"),
) -> None:
    """Validate the adapter configuration and print it."""
    config = _load(config_path)

    table = Table(title="Adapter Config")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in config.model_dump().items():
        table.add_row(key, str(value) if value != "" else "[dim](unset)[/dim]")
    console.print(table)

    missing = [k for k in ("project_id", "host") if not getattr(config, k)]
    if missing:
        console.print(f"[red]Missing required settings:[/red] {', '.join(missing)}")
        raise typer.Exit(1)
    console.print("[green]Valid[/green]")


@app.command()
def provision(
    topic: str = typer.Argument(..., help="Topic id"),
    name: str = typer.Argument(..., help="Subscription id"),
    config_path: str | None = typer.Option(None, "--config", help="Adapter YAML"),
) -> None:
    """Ensure the topic and push subscription exist, without serving."""
    config = _load(config_path)
    subscription = Subscription(topic=topic, name=name, handler=_noop)
    try:
        adapter = create_adapter(config)
        adapter.provisioner.ensure(subscription)
    except PusuError as exc:
        console.print(f"[red]Provisioning failed:[/red] {exc}")
        raise typer.Exit(1) from exc
    endpoint = adapter.provisioner.endpoint_for(subscription)
    console.print(f"[green]Provisioned[/green] {topic}/{name} → {endpoint}")


@app.command()
def serve(
    topic: str = typer.Argument(..., help="Topic id"),
    name: str = typer.Argument(..., help="Subscription id"),
    handler: str = typer.Argument(..., help="Handler as 'module:attribute'"),
    config_path: str | None = typer.Option(None, "--config", help="Adapter YAML"),
    skip_provision: bool = typer.Option(
        False, "--skip-provision", help="Only register the webhook"
    ),
) -> None:
    """Prepare a subscription and serve its push endpoint."""
    config = _load(config_path)
    try:
        subscription = Subscription(
            topic=topic, name=name, handler=import_handler(handler)
        )
    except (ImportError, AttributeError, ValueError) as exc:
        console.print(f"[red]Cannot load handler:[/red] {exc}")
        raise typer.Exit(1) from exc

    try:
        adapter = create_adapter(config)
        if skip_provision:
            subscription.validate(require_handler=True)
            adapter.registrar.register(subscription)
        else:
            adapter.prepare(subscription)
    except PusuError as exc:
        console.print(f"[red]Preparing subscription failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    console.print(
        f"[yellow]Serving[/yellow] {subscription.path} on "
        f"{config.bind_host}:{config.port}"
    )
    adapter.run(subscription)
