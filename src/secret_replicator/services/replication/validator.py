"""Authorization of copy destinations.

A destination namespace opts in to receiving a replica by holding a
managing object, either a ManagedSecret of type ``copy`` named like the
source resource or a plain Secret named like the copy target, annotated
with the ``namespace/name`` of the source ManagedSecret. The annotation is
the only authorization mechanism.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from secret_replicator.integrations.kubernetes.exceptions import KubernetesNotFoundError
from secret_replicator.integrations.kubernetes.models.base import _get_annotations
from secret_replicator.integrations.kubernetes.models.managed_secret import ManagedSecret
from secret_replicator.services.kubernetes.events import REASON_VALIDATE_TARGET

if TYPE_CHECKING:
    from kubernetes.client import V1Secret

    from secret_replicator.integrations.kubernetes.config import ResourceConfig
    from secret_replicator.integrations.kubernetes.models.managed_secret import CopyTarget
    from secret_replicator.services.kubernetes.deadline import Deadline
    from secret_replicator.services.kubernetes.events import EventRecorder
    from secret_replicator.services.kubernetes.store import ObjectStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class OwnedTarget:
    """Destination managed by a ManagedSecret, which will own the replica."""

    resource: ManagedSecret

    @property
    def annotations(self) -> dict[str, str]:
        return self.resource.annotations


@dataclass(frozen=True)
class ForeignTarget:
    """Destination managed by a plain Secret that is updated in place."""

    secret: V1Secret

    @property
    def annotations(self) -> dict[str, str]:
        return _get_annotations(self.secret)


ManagingObject = OwnedTarget | ForeignTarget


@dataclass(frozen=True)
class TargetValidation:
    """Outcome of validating one copy target."""

    authorized: bool
    managing: ManagingObject | None = None
    reason: str = ""


class TargetValidator:
    """Decides whether a copy target may receive a replica."""

    def __init__(
        self,
        store: ObjectStore,
        resource: ResourceConfig,
        events: EventRecorder | None = None,
    ) -> None:
        self._store = store
        self._copy_of = resource.copy_of_annotation
        self._events = events
        self._log = logger.bind(entity="validator")

    def validate(
        self, target: CopyTarget, source: ManagedSecret, deadline: Deadline
    ) -> TargetValidation:
        """Find the managing object of ``target`` and check its authorization.

        Args:
            target: The declared copy destination.
            source: The ManagedSecret whose secret is being replicated.
            deadline: Deadline of the current pass.

        Returns:
            The validation outcome. Unauthorized targets are not errors.

        Raises:
            KubernetesError: If a lookup fails for a reason other than not-found.
        """
        managed = self._lookup_managed_secret(target.namespace, source.name, deadline)
        secret = self._lookup_secret(target.namespace, target.name, deadline)

        if managed is None and secret is None:
            return self._reject(
                source,
                deadline,
                f"No ManagedSecret or Secret found in the target namespace '{target.namespace}'",
            )

        managing: ManagingObject
        if managed is not None:
            if secret is not None:
                self._log.info(
                    "both_managing_objects_found",
                    target=str(target),
                    preferred="ManagedSecret",
                )
            if not managed.is_copy:
                return self._reject(
                    source,
                    deadline,
                    f"ManagedSecret '{managed.namespaced_name}' has type "
                    f"'{managed.spec.type}', it must be 'copy'",
                )
            managing = OwnedTarget(managed)
        else:
            managing = ForeignTarget(secret)

        expected = source.namespaced_name
        actual = managing.annotations.get(self._copy_of)
        if actual != expected:
            return self._reject(
                source,
                deadline,
                f"Target '{target}' is not annotated as a copy of '{expected}' "
                f"(found {actual!r})",
            )

        self._log.debug(
            "copy_target_authorized",
            target=str(target),
            managed_by=type(managing).__name__,
        )
        return TargetValidation(authorized=True, managing=managing)

    def _lookup_managed_secret(
        self, namespace: str, name: str, deadline: Deadline
    ) -> ManagedSecret | None:
        try:
            return self._store.get_managed_secret(namespace, name, deadline)
        except KubernetesNotFoundError:
            return None

    def _lookup_secret(self, namespace: str, name: str, deadline: Deadline) -> V1Secret | None:
        try:
            return self._store.get_secret(namespace, name, deadline)
        except KubernetesNotFoundError:
            return None

    def _reject(self, source: ManagedSecret, deadline: Deadline, reason: str) -> TargetValidation:
        self._log.info("copy_target_rejected", source=source.namespaced_name, reason=reason)
        if self._events is not None:
            self._events.record(source, REASON_VALIDATE_TARGET, reason, deadline)
        return TargetValidation(authorized=False, reason=reason)
