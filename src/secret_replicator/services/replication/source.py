"""Source secret resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from secret_replicator.integrations.kubernetes.exceptions import KubernetesNotFoundError

if TYPE_CHECKING:
    from kubernetes.client import V1Secret

    from secret_replicator.integrations.kubernetes.models.managed_secret import ManagedSecret
    from secret_replicator.services.kubernetes.deadline import Deadline
    from secret_replicator.services.kubernetes.store import ObjectStore

logger = structlog.get_logger()


class SourceResolver:
    """Fetches the secret a ManagedSecret points at."""

    def __init__(self, store: ObjectStore) -> None:
        self._store = store
        self._log = logger.bind(entity="source")

    def resolve(self, owner: ManagedSecret, deadline: Deadline) -> V1Secret | None:
        """Return the source Secret, or None if it was not generated yet.

        Raises:
            KubernetesError: For any failure other than not-found.
        """
        try:
            return self._store.get_secret(owner.namespace, owner.spec.secret_name, deadline)
        except KubernetesNotFoundError:
            self._log.info(
                "source_secret_missing",
                owner=owner.namespaced_name,
                secret=owner.spec.secret_name,
            )
            return None
