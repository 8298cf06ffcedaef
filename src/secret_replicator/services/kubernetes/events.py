"""Kubernetes Event recording for ManagedSecrets."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from kubernetes.client import CoreV1Event, V1EventSource, V1ObjectMeta, V1ObjectReference

from secret_replicator.integrations.kubernetes.exceptions import KubernetesError

if TYPE_CHECKING:
    from secret_replicator.integrations.kubernetes.models.managed_secret import ManagedSecret
    from secret_replicator.services.kubernetes.deadline import Deadline
    from secret_replicator.services.kubernetes.store import ObjectStore

logger = structlog.get_logger()

COMPONENT = "secret-replicator"

# Event reasons
REASON_COPY_RECONCILE = "CopyReconcile"
REASON_VALIDATE_TARGET = "ValidateTargetNamespace"


class EventRecorder:
    """Records Events against a ManagedSecret.

    Recording is best-effort: a failed write is logged and dropped.
    """

    def __init__(self, store: ObjectStore, component: str = COMPONENT) -> None:
        self._store = store
        self._component = component
        self._log = logger.bind(entity="events")

    def record(
        self,
        owner: ManagedSecret,
        reason: str,
        message: str,
        deadline: Deadline,
        *,
        event_type: str = "Normal",
    ) -> None:
        """Record an Event on ``owner``."""
        now = datetime.now(UTC)
        event = CoreV1Event(
            metadata=V1ObjectMeta(
                name=f"{owner.name}.{uuid.uuid4().hex[:16]}",
                namespace=owner.namespace,
            ),
            involved_object=V1ObjectReference(
                api_version=owner.api_version,
                kind=owner.kind,
                name=owner.name,
                namespace=owner.namespace,
                uid=owner.uid,
                resource_version=owner.resource_version,
            ),
            reason=reason,
            message=message,
            type=event_type,
            count=1,
            first_timestamp=now,
            last_timestamp=now,
            source=V1EventSource(component=self._component),
        )
        try:
            self._store.create_event(event, deadline)
        except KubernetesError as e:
            self._log.warning(
                "event_record_failed",
                reason=reason,
                owner=owner.namespaced_name,
                error=str(e),
            )
