"""Owner reference helpers.

Owner references drive garbage collection: a replica Secret owned by a
ManagedSecret is deleted together with it. Kubernetes only honours owner
references within one namespace, so only owners living next to their
dependent are accepted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kubernetes.client import V1ObjectMeta

from secret_replicator.integrations.kubernetes.exceptions import OwnershipError
from secret_replicator.integrations.kubernetes.models.base import OwnerReference

if TYPE_CHECKING:
    from kubernetes.client import V1Secret

    from secret_replicator.integrations.kubernetes.models.managed_secret import ManagedSecret


def _group(api_version: str | None) -> str:
    """Return the API group of an apiVersion (``""`` for the core group)."""
    if not api_version or "/" not in api_version:
        return ""
    return api_version.split("/", 1)[0]


def _same_owner(ref: OwnerReference, other: OwnerReference) -> bool:
    return (
        _group(ref.api_version) == _group(other.api_version)
        and ref.kind == other.kind
        and ref.name == other.name
    )


def set_controller_reference(owner: ManagedSecret, dependent: V1Secret) -> None:
    """Make ``owner`` the controlling owner of ``dependent``.

    An existing reference to the same owner is replaced in place, so calling
    this on every pass leaves the dependent unchanged.

    Args:
        owner: The ManagedSecret that should own the Secret.
        dependent: The Secret to mutate.

    Raises:
        OwnershipError: If the owner lacks identity, lives in another
            namespace, or the dependent is controlled by someone else.
    """
    if dependent.metadata is None:
        dependent.metadata = V1ObjectMeta()
    meta = dependent.metadata

    if not owner.uid or not owner.api_version:
        raise OwnershipError(
            f"owner '{owner.namespaced_name}' has no uid or apiVersion",
            resource_name=meta.name,
            namespace=meta.namespace,
        )

    if owner.namespace != meta.namespace:
        raise OwnershipError(
            f"cross-namespace owner references are disallowed, owner's namespace "
            f"{owner.namespace}, obj's namespace {meta.namespace}",
            resource_name=meta.name,
            namespace=meta.namespace,
        )

    wanted = owner.owner_reference(controller=True)
    existing: list[Any] = list(meta.owner_references or [])

    for raw in existing:
        ref = OwnerReference.from_k8s_object(raw)
        if ref.controller and not _same_owner(ref, wanted):
            raise OwnershipError(
                f"Secret is already owned by another {ref.kind} controller {ref.name}",
                resource_name=meta.name,
                namespace=meta.namespace,
            )

    updated = []
    replaced = False
    for raw in existing:
        if _same_owner(OwnerReference.from_k8s_object(raw), wanted):
            updated.append(wanted.to_k8s_object())
            replaced = True
        else:
            updated.append(raw)
    if not replaced:
        updated.append(wanted.to_k8s_object())

    meta.owner_references = updated
