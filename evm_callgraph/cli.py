"""Click CLI entry point for evm_callgraph.

Commands are thin wrappers: validation lives in eth, HTTP in etherscan,
rendering in output. This is a demonstration surface, not library core.

Exit codes:
  0 — success (including status "0" envelopes; the envelope is printed)
  2 — unexpected upstream payload
  3 — HTTP error (timeout, connection refused, non-2xx)
  4 — invalid address
  5 — config error (missing API key)
"""

from __future__ import annotations

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler

from evm_callgraph import __version__
from evm_callgraph.config import load_config, require_api_key
from evm_callgraph.eth import Address
from evm_callgraph.etherscan import Client
from evm_callgraph.exceptions import EvmCallgraphError
from evm_callgraph.output import format_output

# USDC proxy on mainnet
DEMO_ADDRESS = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


# ── Error handler ─────────────────────────────────────────────────────────────


def _output_error(err: EvmCallgraphError) -> None:
    """Write error JSON to stderr and exit with the error's exit code."""
    sys.stderr.write(json.dumps(err.to_dict()) + "\n")
    sys.stderr.flush()
    sys.exit(err.exit_code)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # httpx logs every request at INFO; keep it quiet unless asked
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _client_from_context(ctx: click.Context) -> Client:
    """Build a Client from config. Raises ConfigError if no API key is set."""
    config = load_config(ctx.obj["config_path"])
    return Client(
        require_api_key(config),
        base_url=config.api.base_url,
        timeout=config.api.timeout_seconds,
    )


# ── Root group ────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    envvar="EVM_CALLGRAPH_CONFIG",
    default=None,
    help="Config file path (default: ~/.evm_callgraph/config.toml)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "table"]),
    default="json",
    help="Output format",
)
@click.option("-v", "--verbose", is_flag=True, help="Log HTTP requests to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, output_format: str, verbose: bool) -> None:
    """Query contract source code and ABI from Etherscan."""
    ctx.ensure_object(dict)
    _configure_logging(verbose)
    ctx.obj["config_path"] = config_path
    ctx.obj["format"] = output_format


# ── Commands ──────────────────────────────────────────────────────────────────


@cli.command("source")
@click.argument("address")
@click.pass_context
def source(ctx: click.Context, address: str) -> None:
    """Fetch verified source code for ADDRESS."""
    try:
        addr = Address(address)
        with _client_from_context(ctx) as client:
            resp = client.get_source_code(addr)
        click.echo(format_output(resp.to_dict(), ctx.obj["format"]))
    except EvmCallgraphError as e:
        _output_error(e)


@cli.command("abi")
@click.argument("address")
@click.pass_context
def abi(ctx: click.Context, address: str) -> None:
    """Fetch the ABI for ADDRESS."""
    try:
        addr = Address(address)
        with _client_from_context(ctx) as client:
            resp = client.get_abi(addr)
        click.echo(format_output(resp.to_dict(), ctx.obj["format"]))
    except EvmCallgraphError as e:
        _output_error(e)


@cli.command("demo")
@click.pass_context
def demo(ctx: click.Context) -> None:
    """Fetch source code and ABI for a fixed well-known contract."""
    try:
        addr = Address(DEMO_ADDRESS)
        with _client_from_context(ctx) as client:
            source_code = client.get_source_code(addr)
            contract_abi = client.get_abi(addr)
        if ctx.obj["format"] == "table":
            click.echo(format_output(source_code.to_dict(), "table"))
            click.echo(format_output(contract_abi.to_dict(), "table"))
        else:
            result = {
                "address": str(addr),
                "source_code": source_code.to_dict(),
                "abi": contract_abi.to_dict(),
            }
            click.echo(format_output(result, "json"))
    except EvmCallgraphError as e:
        _output_error(e)


if __name__ == "__main__":
    cli()
