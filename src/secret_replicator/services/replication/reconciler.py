"""Copy reconciliation of a single ManagedSecret.

One pass loads the ManagedSecret, marks its copies as in progress, reads
the source Secret and walks the declared copy targets in order. The first
failing target stops the walk; targets handled before it keep their new
state. The copy status is settled at the end no matter what happened.
Nothing is cached between passes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from secret_replicator.integrations.kubernetes.exceptions import (
    KubernetesError,
    KubernetesNotFoundError,
)
from secret_replicator.integrations.kubernetes.ownership import set_controller_reference
from secret_replicator.services.kubernetes.deadline import Deadline
from secret_replicator.services.kubernetes.events import EventRecorder
from secret_replicator.services.replication.source import SourceResolver
from secret_replicator.services.replication.status import StatusReporter
from secret_replicator.services.replication.synchronizer import (
    CopySynchronizer,
    OperationResult,
    OwnerSetter,
)
from secret_replicator.services.replication.validator import TargetValidator

if TYPE_CHECKING:
    from kubernetes.client import V1Secret

    from secret_replicator.integrations.kubernetes.config import ResourceConfig
    from secret_replicator.integrations.kubernetes.models.managed_secret import (
        CopyTarget,
        ManagedSecret,
    )
    from secret_replicator.services.kubernetes.store import ObjectStore

logger = structlog.get_logger()


@dataclass
class CopyOutcome:
    """What happened to one copy target during a pass."""

    target: CopyTarget
    authorized: bool
    operation: OperationResult | None = None
    reason: str = ""


@dataclass
class CopyPassResult:
    """Result of one reconciliation pass.

    ``error`` holds the failure that stopped the pass, if any. Targets after
    the failing one are absent from ``outcomes``.
    """

    namespace: str
    name: str
    found: bool = True
    source_found: bool = False
    outcomes: list[CopyOutcome] = field(default_factory=list)
    error: KubernetesError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class CopyReconciler:
    """Drives copy passes for ManagedSecrets.

    Holds only collaborators, so a single instance can reconcile different
    ManagedSecrets concurrently. Callers must not run two passes for the
    same ManagedSecret at once.
    """

    def __init__(
        self,
        store: ObjectStore,
        resource: ResourceConfig,
        ctx_timeout: float,
        *,
        set_owner: OwnerSetter = set_controller_reference,
        record_events: bool = True,
    ) -> None:
        events = EventRecorder(store) if record_events else None
        self._store = store
        self._ctx_timeout = ctx_timeout
        self._source = SourceResolver(store)
        self._validator = TargetValidator(store, resource, events)
        self._synchronizer = CopySynchronizer(store, resource, set_owner, events)
        self._status = StatusReporter(store)
        self._log = logger.bind(entity="reconciler")

    def reconcile(self, namespace: str, name: str) -> CopyPassResult:
        """Run one copy pass for the ManagedSecret ``namespace/name``.

        The status is settled even when an unexpected error escapes the
        copy loop; such an error propagates afterwards.

        Returns:
            The pass result. Per-target failures are reported on it rather
            than raised so the caller can decide whether to trigger again.

        Raises:
            KubernetesError: If the ManagedSecret itself cannot be read.
        """
        deadline = Deadline.after(self._ctx_timeout)
        log = self._log.bind(managed_secret=f"{namespace}/{name}")
        log.info("reconciling_managed_secret")

        result = CopyPassResult(namespace=namespace, name=name)
        try:
            owner = self._store.get_managed_secret(namespace, name, deadline)
        except KubernetesNotFoundError:
            log.info("skip_reconcile_managed_secret_not_found")
            result.found = False
            return result

        self._status.mark_in_progress(owner, deadline)
        try:
            self._copy_all(owner, deadline, result)
        except KubernetesError as e:
            log.error("copy_pass_failed", error=str(e))
            result.error = e
        finally:
            self._status.mark_settled(owner, deadline)

        log.info(
            "reconciled_managed_secret",
            copies=len(owner.spec.copies),
            processed=len(result.outcomes),
            failed=result.error is not None,
        )
        return result

    def _copy_all(self, owner: ManagedSecret, deadline: Deadline, result: CopyPassResult) -> None:
        if not owner.spec.copies:
            return

        source_secret = self._source.resolve(owner, deadline)
        if source_secret is None:
            return
        result.source_found = True

        for target in owner.spec.copies:
            result.outcomes.append(self._copy_one(target, owner, source_secret, deadline))

    def _copy_one(
        self,
        target: CopyTarget,
        owner: ManagedSecret,
        source_secret: V1Secret,
        deadline: Deadline,
    ) -> CopyOutcome:
        validation = self._validator.validate(target, owner, deadline)
        if not validation.authorized or validation.managing is None:
            return CopyOutcome(target=target, authorized=False, reason=validation.reason)

        operation = self._synchronizer.synchronize(
            target, source_secret, owner, validation.managing, deadline
        )
        return CopyOutcome(target=target, authorized=True, operation=operation)
