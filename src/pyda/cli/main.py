"""
Command-line interface for the pyda DA service.

`pyda serve` runs the DA service. The other commands talk to a running
service the same way a rollup node does.
"""
import json
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Optional

import dotenv
import typer
from rich.console import Console
from rich.table import Table

from pyda.core.config import load_config_from_env
from pyda.core.da import (
    ConfigError,
    Context,
    get_client,
    registered_clients,
    supports_block_retrieval,
)
from pyda.core.db.kvstore import SQLiteKVStore
from pyda.core.models.block import Block
from pyda.core.models.namespace import namespace_id_from_str
from pyda.core.models.result import BaseResult, ResultCheckBlock, ResultRetrieveBlocks, StatusCode
from pyda.server.client import connect
from pyda.server.service import DAServer, DAService

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("pyda.cli")

app = typer.Typer(help="pyda - data availability layer client service")
console = Console()

# Global reference to the server for signal handling
server: Optional[DAServer] = None


def signal_handler(sig, frame):
    """Handle signals for graceful shutdown."""
    logger.info("Received shutdown signal, stopping DA service...")
    if server:
        server.stop_background()
    sys.exit(0)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Interface to listen on"),
    port: Optional[int] = typer.Option(None, help="TCP port to listen on"),
    backend: Optional[str] = typer.Option(None, help=f"DA backend ({', '.join(registered_clients())})"),
    namespace: Optional[str] = typer.Option(None, help="Namespace ID (hex) or name"),
    da_config: Optional[Path] = typer.Option(None, help="Path to the JSON backend configuration"),
    init: bool = typer.Option(True, help="Initialize and start the client before serving"),
):
    """Run the DA service.

    Settings come from PYDA_* environment variables (a .env file is read
    if present); command-line options override them.
    """
    global server

    dotenv.load_dotenv()
    cfg = load_config_from_env()
    if host is not None:
        cfg.host = host
    if port is not None:
        cfg.port = port
    if backend is not None:
        cfg.backend = backend
    if namespace is not None:
        cfg.namespace = namespace
    if da_config is not None:
        cfg.da_config_file = da_config

    logging.getLogger().setLevel(cfg.log_level.upper())
    logger.info(f"Configuration: backend={cfg.backend}, listen={cfg.host}:{cfg.port}, kv={cfg.kv_path}")

    try:
        client = get_client(cfg.backend)
    except KeyError as e:
        typer.echo(f"❌ {e.args[0]}")
        raise typer.Exit(1)

    kv_store = SQLiteKVStore(cfg.kv_path)
    client_logger = logging.getLogger(f"pyda.da.{cfg.backend}")

    if init:
        try:
            client.init(
                namespace_id_from_str(cfg.namespace), cfg.read_da_config(), kv_store, client_logger
            )
            client.start()
        except (ConfigError, OSError) as e:
            typer.echo(f"❌ Could not initialize {cfg.backend} client: {str(e)}")
            raise typer.Exit(1)

    service = DAService(client, kv_store, client_logger, request_timeout=cfg.request_timeout)
    server = DAServer((cfg.host, cfg.port), service)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        server.start_background()
        logger.info("DA service is running. Press Ctrl+C to stop.")
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, stopping service...")
        server.stop_background()


@app.command()
def submit(
    block_file: Path = typer.Argument(..., help="JSON file holding the block to submit"),
    host: str = typer.Option("127.0.0.1", help="DA service host"),
    port: int = typer.Option(1234, help="DA service port"),
    timeout: float = typer.Option(60.0, help="Seconds to wait for the result"),
):
    """Submit a block to the DA layer through a running DA service."""
    block = Block.model_validate_json(block_file.read_bytes())
    client = _connect(host, port, timeout)
    result = client.submit_block(Context.with_timeout(timeout), block)
    _finish(result)


@app.command()
def check(
    height: int = typer.Argument(..., help="DA layer height to check"),
    host: str = typer.Option("127.0.0.1", help="DA service host"),
    port: int = typer.Option(1234, help="DA service port"),
    timeout: float = typer.Option(60.0, help="Seconds to wait for the result"),
):
    """Check data availability at a DA layer height."""
    client = _connect(host, port, timeout)
    result = client.check_block_availability(Context.with_timeout(timeout), height)
    _finish(result)


@app.command()
def retrieve(
    height: int = typer.Argument(..., help="DA layer height to retrieve"),
    host: str = typer.Option("127.0.0.1", help="DA service host"),
    port: int = typer.Option(1234, help="DA service port"),
    timeout: float = typer.Option(60.0, help="Seconds to wait for the result"),
):
    """Retrieve the blocks stored at a DA layer height."""
    client = _connect(host, port, timeout)
    if not supports_block_retrieval(client):
        typer.echo("❌ The DA backend behind this service cannot retrieve blocks")
        raise typer.Exit(1)
    result = client.retrieve_blocks(Context.with_timeout(timeout), height)
    _finish(result)


def _connect(host: str, port: int, timeout: float):
    try:
        return connect(host, port, timeout=timeout)
    except OSError as e:
        typer.echo(f"❌ Cannot reach DA service at {host}:{port}: {str(e)}")
        raise typer.Exit(1)


def _finish(result: BaseResult) -> None:
    console.print(render_result(result))
    if result.code != StatusCode.SUCCESS:
        raise typer.Exit(1)


def render_result(result: BaseResult) -> Table:
    """Render a DA result as a two-column table."""
    table = Table(title=type(result).__name__)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    style = "green" if result.code == StatusCode.SUCCESS else "red"
    table.add_row("code", f"[{style}]{result.code.name}[/{style}]")
    table.add_row("message", result.message or "-")
    table.add_row("da_height", str(result.da_height))

    if isinstance(result, ResultCheckBlock):
        table.add_row("data_available", str(result.data_available))
    if isinstance(result, ResultRetrieveBlocks):
        table.add_row("blocks", str(len(result.blocks)))
        for block in result.blocks:
            sizes = json.dumps([len(tx) for tx in block.data.txs])
            table.add_row(f"block {block.height}", f"tx sizes {sizes}")
    return table


if __name__ == "__main__":
    app()
