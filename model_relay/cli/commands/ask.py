"""One-off prompt command for the relay CLI."""

import asyncio
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from model_relay.core.config import get_config
from model_relay.core.exceptions import RelayError
from model_relay.core.orchestrator import build_orchestrator


async def _dispatch(
    messages: list[dict[str, Any]], feature: str | None, model: str | None
) -> str:
    orchestrator = build_orchestrator(get_config())
    try:
        return await orchestrator.dispatch(messages, feature=feature, preferred_model=model)
    finally:
        await orchestrator.aclose()


def ask(
    prompt: str = typer.Argument(..., help="User message to send"),
    feature: str = typer.Option(None, "--feature", "-f", help="Routing feature"),
    model: str = typer.Option(None, "--model", "-m", help="Preferred model id"),
    system: str = typer.Option(None, "--system", "-s", help="System prompt"),
) -> None:
    """Send a single prompt through the router and print the reply."""
    console = Console()

    messages: list[dict[str, Any]] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    try:
        result = asyncio.run(_dispatch(messages, feature, model))
    except RelayError as e:
        console.print(f"[red]❌ {escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e

    console.print(Panel(Text(result), title="Reply", expand=False))
