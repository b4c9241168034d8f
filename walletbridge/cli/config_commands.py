"""Config command group."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from walletbridge.config.loader import convert_to_camel, get_config_path, load_config
from walletbridge.utils.exceptions import WalletBridgeError, sanitize_error_message


def register_config_commands(app: typer.Typer, console: Console) -> None:
    """Register the ``config`` command group."""
    config_app = typer.Typer(help="Inspect configuration")
    app.add_typer(config_app, name="config")

    @config_app.command("show")
    def config_show(
        config_path: Path = typer.Option(None, "--config", "-c", help="Config file"),
        as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
    ) -> None:
        path = config_path or get_config_path()
        try:
            cfg = load_config(path)
        except WalletBridgeError as exc:
            console.print(f"[red]{escape(exc.message)}[/red]")
            raise typer.Exit(1)
        data = convert_to_camel(cfg.model_dump())
        data["provider"]["rpcUrl"] = sanitize_error_message(data["provider"]["rpcUrl"])
        if as_json:
            console.print(json.dumps(data, indent=2, ensure_ascii=False), markup=False)
            return
        table = Table(title=f"walletbridge config ({path})")
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in data["provider"].items():
            table.add_row(f"provider.{key}", escape(str(value)))
        table.add_row("logLevel", str(data["logLevel"]))
        table.add_row("forwardLogsToHost", str(data["forwardLogsToHost"]))
        console.print(table)
