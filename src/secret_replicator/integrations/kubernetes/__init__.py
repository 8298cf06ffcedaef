"""Kubernetes integration - API client, configuration and ownership helpers."""

from secret_replicator.integrations.kubernetes.client import KubernetesClient
from secret_replicator.integrations.kubernetes.config import (
    ClusterConfig,
    ControllerDefaultsConfig,
    ReplicatorConfig,
    ResourceConfig,
)
from secret_replicator.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
    OwnershipError,
)
from secret_replicator.integrations.kubernetes.ownership import set_controller_reference

__all__ = [
    "ClusterConfig",
    "ControllerDefaultsConfig",
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConflictError",
    "KubernetesConnectionError",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesTimeoutError",
    "KubernetesValidationError",
    "OwnershipError",
    "ReplicatorConfig",
    "ResourceConfig",
    "set_controller_reference",
]
