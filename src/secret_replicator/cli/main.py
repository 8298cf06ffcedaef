"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from rich.console import Console

from secret_replicator import __version__
from secret_replicator.cli.commands import check, reconcile
from secret_replicator.integrations.kubernetes.config import ReplicatorConfig
from secret_replicator.logging.config import configure_logging

app = typer.Typer(
    name="secret-replicator",
    help="Replicate generated secrets into authorized namespaces.",
    add_completion=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"secret-replicator version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="YAML configuration file.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    json_logs: bool | None = typer.Option(
        None,
        "--json-logs/--console-logs",
        help="Emit logs as JSON lines or for the console. Defaults to JSON inside a pod.",
    ),
) -> None:
    """Secret replicator - copy generated secrets across namespaces."""
    try:
        config = (
            ReplicatorConfig.from_file(config_file) if config_file else ReplicatorConfig.from_env()
        )
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(2) from e

    configure_logging(
        verbose=verbose,
        debug=debug,
        json_output=json_logs if json_logs is not None else config.logging.json_output,
        log_to_file=config.logging.file,
        log_dir=config.logging.log_dir,
    )
    ctx.obj = {"config": config}


app.command()(reconcile.reconcile)
app.command()(check.check)


if __name__ == "__main__":
    app()
