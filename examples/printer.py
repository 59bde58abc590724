#!/usr/bin/env python3
"""Runnable demo: print every message pushed to the ``printing`` subscription.

Prerequisites:
    export PUB_SUB_PROJECT_ID=my-project
    export BASE_HOST=https://printer-dot-my-project.appspot.com
    uv run python examples/printer.py
"""

from __future__ import annotations

import sys

from rich.console import Console

from pusu import Message, PusuError, Subscription, create_adapter
from pusu.config.loader import load_config
from pusu.logging_config import configure_logging

console = Console()


class Printer:
    def handle(self, message: Message) -> None:
        console.print("[cyan]printing message...[/cyan]", message.data)


def main() -> None:
    config = load_config()
    configure_logging(config.log_level, json_logs=config.json_logs)

    subscription = Subscription(topic="printer", name="printing", handler=Printer())
    try:
        adapter = create_adapter(config)
        adapter.prepare(subscription)
    except PusuError as exc:
        console.print(f"[red]Cannot prepare subscription:[/red] {exc}")
        sys.exit(1)

    console.print("[green]Subscription is listening[/green]", subscription.path)
    adapter.run(subscription)


if __name__ == "__main__":
    main()
