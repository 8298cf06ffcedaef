"""Kubernetes resource models used by the copy controller."""

from secret_replicator.integrations.kubernetes.models.base import (
    K8sEntityBase,
    OwnerReference,
)
from secret_replicator.integrations.kubernetes.models.managed_secret import (
    CopyTarget,
    ManagedSecret,
    ManagedSecretSpec,
    ManagedSecretStatus,
    SecretType,
)

__all__ = [
    "CopyTarget",
    "K8sEntityBase",
    "ManagedSecret",
    "ManagedSecretSpec",
    "ManagedSecretStatus",
    "OwnerReference",
    "SecretType",
]
