"""Configuration commands for the relay CLI."""

import typer
from rich.console import Console
from rich.table import Table

from model_relay.core.config.schema import ConfigSchema
from model_relay.core.config.validation import ConfigError, load_all_specs

app = typer.Typer(help="Configuration management")

# Values of these variables are never printed in full
SECRET_VARS = frozenset({"FALLBACK_API_KEYS"})


def _mask(value: object) -> str:
    if isinstance(value, tuple):
        return ", ".join(f"{str(v)[:4]}…" for v in value) or "(none)"
    text = str(value)
    return f"{text[:4]}…" if len(text) > 4 else "****"


@app.command()
def show() -> None:
    """Show the effective configuration."""
    console = Console()

    table = Table(title="Model Relay Configuration")
    table.add_column("Variable", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Description")

    values = load_all_specs()
    for name, spec in sorted(ConfigSchema.all_specs().items()):
        value = values[name]
        if isinstance(value, ConfigError):
            shown = f"[red]invalid: {value.message}[/red]"
        elif spec.name in SECRET_VARS and value:
            shown = _mask(value)
        else:
            shown = "(unset)" if value is None or value == () else str(value)
        table.add_row(spec.name, shown, spec.description)

    console.print(table)


@app.command()
def validate() -> None:
    """Validate every configuration variable."""
    console = Console()

    errors = [value for value in load_all_specs().values() if isinstance(value, ConfigError)]
    if errors:
        for error in errors:
            console.print(f"[red]❌ {error.env_var}={error.value!r}: {error.message}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]✅ Configuration is valid[/green]")


@app.command()
def docs() -> None:
    """Print Markdown documentation for all environment variables."""
    typer.echo(ConfigSchema.generate_markdown_docs())
