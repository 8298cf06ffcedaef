"""Replica payload construction and idempotent writes.

Two write paths exist, picked by the managing object of the destination:

- owned: the destination ManagedSecret becomes the controlling owner of the
  replica, which is created if absent and updated otherwise;
- foreign: the existing plain Secret is updated in place. It is never
  created and gets no owner reference, since owner references cannot
  cross namespaces.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog
from kubernetes.client import V1ObjectMeta, V1Secret

from secret_replicator.integrations.kubernetes.exceptions import KubernetesNotFoundError
from secret_replicator.integrations.kubernetes.models.base import _get_annotations, _get_labels
from secret_replicator.integrations.kubernetes.ownership import set_controller_reference
from secret_replicator.services.kubernetes.events import REASON_COPY_RECONCILE
from secret_replicator.services.replication.validator import ForeignTarget, OwnedTarget

if TYPE_CHECKING:
    from secret_replicator.integrations.kubernetes.config import ResourceConfig
    from secret_replicator.integrations.kubernetes.models.managed_secret import (
        CopyTarget,
        ManagedSecret,
    )
    from secret_replicator.services.kubernetes.deadline import Deadline
    from secret_replicator.services.kubernetes.events import EventRecorder
    from secret_replicator.services.kubernetes.store import ObjectStore
    from secret_replicator.services.replication.validator import ManagingObject

logger = structlog.get_logger()

OwnerSetter = Callable[["ManagedSecret", V1Secret], None]


class OperationResult(StrEnum):
    """What a synchronization did to the replica."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


def _managed_fields(secret: V1Secret) -> tuple[dict[str, str], dict[str, str], dict[str, str]]:
    return dict(secret.data or {}), _get_labels(secret), _get_annotations(secret)


class CopySynchronizer:
    """Writes replicas of a source Secret into authorized destinations."""

    def __init__(
        self,
        store: ObjectStore,
        resource: ResourceConfig,
        set_owner: OwnerSetter = set_controller_reference,
        events: EventRecorder | None = None,
    ) -> None:
        self._store = store
        self._copy_of = resource.copy_of_annotation
        self._set_owner = set_owner
        self._events = events
        self._log = logger.bind(entity="synchronizer")

    def build_payload(
        self, target: CopyTarget, source_secret: V1Secret, source: ManagedSecret
    ) -> V1Secret:
        """Build the desired replica of ``source_secret`` for ``target``.

        Data, labels and annotations are copied verbatim, then the copy-of
        annotation is stamped with the identity of ``source``. Stamping on
        every pass repairs a tampered annotation on the destination.
        """
        data, labels, annotations = _managed_fields(source_secret)
        annotations[self._copy_of] = source.namespaced_name
        return V1Secret(
            api_version="v1",
            kind="Secret",
            metadata=V1ObjectMeta(
                name=target.name,
                namespace=target.namespace,
                labels=labels,
                annotations=annotations,
            ),
            data=data,
            type=source_secret.type,
        )

    def synchronize(
        self,
        target: CopyTarget,
        source_secret: V1Secret,
        source: ManagedSecret,
        managing: ManagingObject,
        deadline: Deadline,
    ) -> OperationResult:
        """Bring the replica at ``target`` in line with ``source_secret``.

        Args:
            target: The authorized copy destination.
            source_secret: Current content of the source Secret.
            source: The ManagedSecret being reconciled.
            managing: Managing object returned by the validator.
            deadline: Deadline of the current pass.

        Returns:
            Whether the replica was created, updated or already in sync.

        Raises:
            KubernetesError: If a read or write fails, including not-found
                when a foreign Secret disappears before it is updated.
            OwnershipError: If the owner reference cannot be set.
        """
        desired = self.build_payload(target, source_secret, source)

        if isinstance(managing, OwnedTarget):
            result = self._create_or_update_owned(desired, managing.resource, deadline)
        elif isinstance(managing, ForeignTarget):
            result = self._update_foreign(desired, managing.secret, deadline)
        else:
            raise TypeError(f"Unsupported managing object: {managing!r}")

        if result is OperationResult.UNCHANGED:
            self._log.debug("copy_unchanged", target=str(target))
        else:
            self._log.info("copy_synchronized", target=str(target), operation=result.value)
            if self._events is not None:
                self._events.record(
                    source,
                    REASON_COPY_RECONCILE,
                    f"Copy secret '{target.name}' has been {result.value} "
                    f"in namespace '{target.namespace}'",
                    deadline,
                )
        return result

    def _apply(self, secret: V1Secret, desired: V1Secret) -> None:
        """Overwrite the managed fields of ``secret`` with ``desired``'s."""
        data, labels, annotations = _managed_fields(desired)
        if secret.metadata is None:
            secret.metadata = V1ObjectMeta(
                name=desired.metadata.name, namespace=desired.metadata.namespace
            )
        secret.data = data
        secret.metadata.labels = labels
        secret.metadata.annotations = annotations

    def _create_or_update_owned(
        self, desired: V1Secret, owner: ManagedSecret, deadline: Deadline
    ) -> OperationResult:
        name = desired.metadata.name
        namespace = desired.metadata.namespace
        try:
            existing = self._store.get_secret(namespace, name, deadline)
        except KubernetesNotFoundError:
            existing = None

        if existing is None:
            self._set_owner(owner, desired)
            self._store.create_secret(desired, deadline)
            return OperationResult.CREATED

        before = _managed_fields(existing), copy.deepcopy(existing.metadata.owner_references)
        self._apply(existing, desired)
        self._set_owner(owner, existing)
        # the API server drops empty maps, so compare normalized fields
        if (_managed_fields(existing), existing.metadata.owner_references) == before:
            return OperationResult.UNCHANGED

        # existing still carries the resourceVersion it was read with
        self._store.update_secret(existing, deadline)
        return OperationResult.UPDATED

    def _update_foreign(
        self, desired: V1Secret, current: V1Secret, deadline: Deadline
    ) -> OperationResult:
        if _managed_fields(current) == _managed_fields(desired):
            return OperationResult.UNCHANGED

        updated = copy.deepcopy(current)
        self._apply(updated, desired)
        self._store.update_secret(updated, deadline)
        return OperationResult.UPDATED
