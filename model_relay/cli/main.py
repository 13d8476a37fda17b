"""Main CLI entry point for model-relay."""

import logging

import typer
from rich.console import Console

from model_relay.cli.commands import ask, config, models, start

app = typer.Typer(
    name="relay",
    help="Model Relay CLI - route chat completions across your configured models",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(models.app, name="models", help="Inspect and maintain the model registry")
app.add_typer(config.app, name="config", help="Configuration management")
app.command(name="start")(start.start)
app.command(name="ask")(ask.ask)


@app.command()
def version() -> None:
    """Show version information."""
    from model_relay import __version__

    console = Console()
    console.print(f"[bold cyan]relay[/bold cyan] version [green]{__version__}[/green]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Model Relay CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


if __name__ == "__main__":
    app()
