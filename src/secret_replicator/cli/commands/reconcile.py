"""Reconcile command: run one copy pass for a ManagedSecret."""

from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.table import Table

from secret_replicator.integrations.kubernetes.client import KubernetesClient
from secret_replicator.integrations.kubernetes.config import ReplicatorConfig
from secret_replicator.integrations.kubernetes.exceptions import KubernetesError
from secret_replicator.logging.config import get_logger
from secret_replicator.services.kubernetes.store import KubernetesObjectStore
from secret_replicator.services.replication.reconciler import CopyPassResult, CopyReconciler

console = Console()
logger = get_logger(__name__)


def _result_to_dict(result: CopyPassResult) -> dict[str, object]:
    return {
        "managedSecret": f"{result.namespace}/{result.name}",
        "found": result.found,
        "sourceFound": result.source_found,
        "copies": [
            {
                "namespace": outcome.target.namespace,
                "name": outcome.target.name,
                "authorized": outcome.authorized,
                "operation": outcome.operation.value if outcome.operation else None,
                "reason": outcome.reason,
            }
            for outcome in result.outcomes
        ],
        "error": str(result.error) if result.error else None,
    }


def _print_table(result: CopyPassResult) -> None:
    table = Table(title=f"Copies of {result.namespace}/{result.name}")
    table.add_column("Namespace", style="cyan", no_wrap=True)
    table.add_column("Secret", style="cyan")
    table.add_column("Result", style="green")
    table.add_column("Details", style="dim")

    for outcome in result.outcomes:
        if outcome.authorized and outcome.operation is not None:
            table.add_row(
                outcome.target.namespace, outcome.target.name, outcome.operation.value, ""
            )
        else:
            table.add_row(
                outcome.target.namespace,
                outcome.target.name,
                "[yellow]skipped[/yellow]",
                outcome.reason,
            )

    console.print(table)
    if not result.source_found:
        console.print("[yellow]Source secret not available yet, nothing copied.[/yellow]")
    if result.error is not None:
        console.print(f"[red]Pass stopped:[/red] {result.error}")


def reconcile(
    ctx: typer.Context,
    namespace: str = typer.Argument(..., help="Namespace of the ManagedSecret."),
    name: str = typer.Argument(..., help="Name of the ManagedSecret."),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format (table, json). Defaults to the configured format.",
    ),
    events: bool = typer.Option(
        True,
        "--events/--no-events",
        help="Record Kubernetes Events on the ManagedSecret.",
    ),
) -> None:
    """Run one copy pass for a ManagedSecret."""
    config: ReplicatorConfig = ctx.obj["config"]
    output_format = output or config.output_format
    logger.info("Running copy pass", namespace=namespace, name=name)

    try:
        with KubernetesClient(config) as client:
            reconciler = CopyReconciler(
                KubernetesObjectStore(client),
                client.resource,
                client.ctx_timeout,
                record_events=events,
            )
            result = reconciler.reconcile(namespace, name)
    except KubernetesError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if not result.found:
        console.print(f"[yellow]ManagedSecret {namespace}/{name} not found.[/yellow]")
        return

    if output_format == "json":
        console.print_json(json.dumps(_result_to_dict(result)))
    else:
        _print_table(result)

    if result.error is not None:
        raise typer.Exit(1)
