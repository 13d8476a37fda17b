"""Start command for the relay CLI."""

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from model_relay.core.config import get_config
from model_relay.core.logging import configure_root_logging


def start(
    host: str = typer.Option(None, "--host", help="Override host"),
    port: int = typer.Option(None, "--port", help="Override port"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
) -> None:
    """Start the relay server."""
    console = Console()
    cfg = get_config()

    server_host = host or cfg.host
    server_port = port or cfg.port

    table = Table(title="Model Relay Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Host", server_host)
    table.add_row("Port", str(server_port))
    table.add_row("Registry", str(cfg.registry_path))
    table.add_row("Call Log", str(cfg.call_log_path) if cfg.call_log_path else "logger")
    table.add_row("Default Feature", cfg.default_feature)
    table.add_row("Request Timeout", f"{cfg.request_timeout}s")
    table.add_row(
        "Fallback",
        f"{cfg.fallback_provider}/{cfg.fallback_model}" if cfg.fallback_api_keys else "disabled",
    )

    console.print(table)

    log_level = configure_root_logging(cfg.log_level).lower()
    uvicorn.run(
        "model_relay.main:app",
        host=server_host,
        port=server_port,
        reload=reload,
        log_level=log_level,
        access_log=log_level == "debug",
    )
