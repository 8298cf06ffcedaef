"""Check command: verify the API server is reachable."""

from __future__ import annotations

import typer
from rich.console import Console

from secret_replicator.integrations.kubernetes.client import KubernetesClient
from secret_replicator.integrations.kubernetes.config import ReplicatorConfig
from secret_replicator.integrations.kubernetes.exceptions import KubernetesError
from secret_replicator.logging.config import get_logger

console = Console()
logger = get_logger(__name__)


def check(ctx: typer.Context) -> None:
    """Check connectivity to the cluster, retrying transient failures."""
    config: ReplicatorConfig = ctx.obj["config"]

    try:
        with KubernetesClient(config) as client:
            get_version = client.make_retry_decorator()(client.get_cluster_version)
            version = get_version()
            context = client.get_current_context()
    except KubernetesError as e:
        logger.warning("Cluster check failed", error=str(e))
        console.print(f"[red]Cluster unreachable:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]Connected[/green] to {context} (Kubernetes {version})")
    console.print(
        f"Resource: [cyan]{config.resource.plural}.{config.resource.group}"
        f"/{config.resource.version}[/cyan]"
    )
