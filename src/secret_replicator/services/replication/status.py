"""Copy status reporting on the ManagedSecret status sub-resource."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from secret_replicator.integrations.kubernetes.exceptions import KubernetesError

if TYPE_CHECKING:
    from secret_replicator.integrations.kubernetes.models.managed_secret import ManagedSecret
    from secret_replicator.services.kubernetes.deadline import Deadline
    from secret_replicator.services.kubernetes.store import ObjectStore

logger = structlog.get_logger()


class StatusReporter:
    """Toggles ``status.copied`` around a copy pass.

    Status is an observability signal: write failures are logged and the
    pass carries on.
    """

    def __init__(self, store: ObjectStore) -> None:
        self._store = store
        self._log = logger.bind(entity="status")

    def mark_in_progress(self, owner: ManagedSecret, deadline: Deadline) -> None:
        """Set ``copied=false`` before copies are processed."""
        self._set_copied(owner, False, deadline)

    def mark_settled(self, owner: ManagedSecret, deadline: Deadline) -> None:
        """Set ``copied=true`` once the pass is over, whatever its outcome."""
        self._set_copied(owner, True, deadline)

    def _set_copied(self, owner: ManagedSecret, copied: bool, deadline: Deadline) -> None:
        owner.status.copied = copied
        try:
            self._store.patch_managed_secret_status(owner, {"copied": copied}, deadline)
        except KubernetesError as e:
            self._log.error(
                "copy_status_update_failed",
                owner=owner.namespaced_name,
                copied=copied,
                error=str(e),
            )
