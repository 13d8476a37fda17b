"""Registry commands for the relay CLI."""

import asyncio

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from model_relay.core.config import get_config
from model_relay.core.exceptions import RegistryUnavailable
from model_relay.core.models import Model
from model_relay.core.registry import JsonFileRegistryStore, ModelRegistryAccessor

app = typer.Typer(help="Inspect and maintain the model registry")

STATUS_STYLES = {"green": "green", "yellow": "yellow", "red": "red"}


def _store() -> JsonFileRegistryStore:
    return JsonFileRegistryStore(get_config().registry_path)


async def _load(feature: str | None) -> list[Model]:
    store = _store()
    if feature:
        return await ModelRegistryAccessor(store).list_candidates(feature)
    return sorted(await store.list_models(), key=lambda m: m.priority)


@app.command("list")
def list_models(
    feature: str = typer.Option(
        None, "--feature", "-f", help="Show only the candidates for this feature"
    ),
) -> None:
    """Show the routing table in dispatch order."""
    console = Console()

    try:
        models = asyncio.run(_load(feature))
    except RegistryUnavailable as e:
        console.print(f"[red]❌ {escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e

    title = f"Candidates for '{feature}'" if feature else "Model Registry"
    table = Table(title=title)
    table.add_column("Priority", justify="right")
    table.add_column("Model", style="cyan")
    table.add_column("Provider", style="magenta")
    table.add_column("Enabled")
    table.add_column("Keys", justify="right")
    table.add_column("Next Key", justify="right")
    table.add_column("Usage", justify="right")
    table.add_column("Status")

    for model in models:
        key_count = len(model.api_keys)
        next_key = str(model.current_key_index % key_count) if key_count else "-"
        style = STATUS_STYLES.get(model.status, "white")
        table.add_row(
            str(model.priority),
            model.id,
            model.provider,
            "✅" if model.enabled else "❌",
            str(key_count),
            next_key,
            f"{model.used_today}/{model.daily_limit}",
            f"[{style}]{model.status}[/{style}]",
        )

    if not models:
        console.print("[yellow]No models found[/yellow]")
        return
    console.print(table)


@app.command("reset-usage")
def reset_usage() -> None:
    """Reset every model's daily usage counter to zero."""
    console = Console()

    try:
        changed = asyncio.run(_store().reset_usage())
    except RegistryUnavailable as e:
        console.print(f"[red]❌ {escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Usage counters reset ({changed} model(s) changed)[/green]")
