"""CLI commands for walletbridge.

Runs provider requests from the terminal: local methods answer directly,
upstream methods hit the configured node, and host-bound frames are printed
since no wallet host is attached.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from walletbridge import __logo__, __version__
from walletbridge.cli.config_commands import register_config_commands
from walletbridge.config.loader import load_config
from walletbridge.config.schema import ProviderConfig
from walletbridge.host.sinks import CallbackSink
from walletbridge.provider.facade import WalletProvider
from walletbridge.utils.exceptions import (
    ProviderRpcError,
    WalletBridgeError,
    classify_exception,
    sanitize_error_message,
)

app = typer.Typer(
    name="walletbridge",
    help=f"{__logo__} walletbridge - Ethereum provider bridge to a wallet host",
    no_args_is_help=True,
)

console = Console()


def _print_json(label: str, value: Any) -> None:
    console.print(f"[bold]{label}[/bold]")
    console.print(Syntax(json.dumps(value, indent=2, ensure_ascii=False, default=str), "json"))


def _parse_params(raw: str | None) -> Any:
    if raw is None or raw == "":
        return []
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        console.print(f"[red]PARAMS must be JSON:[/red] {exc}")
        raise typer.Exit(2)


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


@app.callback()
def main() -> None:
    """walletbridge command line."""


@app.command()
def version() -> None:
    """Show version."""
    console.print(f"{__logo__} walletbridge v{__version__}")


@app.command("request")
def request_command(
    method: str = typer.Argument(..., help="JSON-RPC method, e.g. eth_chainId"),
    params: str = typer.Argument(None, help="JSON params, e.g. '[\"0xdead\", \"latest\"]'"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.walletbridge/config.json)"),
    rpc_url: str = typer.Option(None, "--rpc-url", help="Override upstream RPC url"),
    chain_id: str = typer.Option(None, "--chain-id", help="Override chain id (decimal or 0x hex)"),
    address: str = typer.Option(None, "--address", help="Override wallet address"),
    envelope: bool = typer.Option(False, "--envelope", help="Print the full JSON-RPC response"),
    wait: float = typer.Option(1.0, "--wait", help="Seconds to wait for a host reply"),
    debug: bool = typer.Option(False, "--debug", help="Trace requests"),
) -> None:
    """Run one request through a provider."""
    try:
        cfg = load_config(config_path)
    except WalletBridgeError as exc:
        console.print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(1)
    _configure_logging("DEBUG" if debug else cfg.log_level)

    overrides: dict[str, Any] = {"request_timeout": wait, "is_debug": debug or cfg.provider.is_debug}
    if rpc_url is not None:
        overrides["rpc_url"] = rpc_url
    if chain_id is not None:
        overrides["chain_id"] = chain_id
    if address is not None:
        overrides["address"] = address
    provider_cfg = ProviderConfig.model_validate({**cfg.provider.model_dump(), **overrides})

    payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": _parse_params(params)}

    async def run() -> Any:
        sink = CallbackSink(lambda frame: _print_json("host frame", json.loads(frame)))
        provider = WalletProvider(provider_cfg, sink=sink)
        try:
            if envelope:
                return await provider.request_envelope(payload)
            return await provider.request(payload)
        finally:
            await provider.close()

    try:
        result = asyncio.run(run())
    except ProviderRpcError as exc:
        _print_json("error", exc.to_dict())
        raise typer.Exit(1)
    except WalletBridgeError as exc:
        _, _, retryable = classify_exception(exc)
        hint = " (temporary, try again)" if retryable else ""
        console.print(f"[red]{escape(sanitize_error_message(str(exc)))}[/red]{hint}")
        raise typer.Exit(1)
    _print_json("result", result)


register_config_commands(app, console)


if __name__ == "__main__":
    app()
