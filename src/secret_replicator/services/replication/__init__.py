"""Cross-namespace replication of ManagedSecret secrets."""

from secret_replicator.services.replication.reconciler import (
    CopyOutcome,
    CopyPassResult,
    CopyReconciler,
)
from secret_replicator.services.replication.source import SourceResolver
from secret_replicator.services.replication.status import StatusReporter
from secret_replicator.services.replication.synchronizer import CopySynchronizer, OperationResult
from secret_replicator.services.replication.validator import (
    ForeignTarget,
    ManagingObject,
    OwnedTarget,
    TargetValidation,
    TargetValidator,
)

__all__ = [
    "CopyOutcome",
    "CopyPassResult",
    "CopyReconciler",
    "CopySynchronizer",
    "ForeignTarget",
    "ManagingObject",
    "OperationResult",
    "OwnedTarget",
    "SourceResolver",
    "StatusReporter",
    "TargetValidation",
    "TargetValidator",
]
