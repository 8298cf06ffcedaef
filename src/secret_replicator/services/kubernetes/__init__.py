"""Kubernetes service module.

Object store, deadline and event plumbing shared by the copy controller.
"""

from secret_replicator.services.kubernetes.deadline import Deadline
from secret_replicator.services.kubernetes.events import EventRecorder
from secret_replicator.services.kubernetes.store import KubernetesObjectStore, ObjectStore

__all__ = [
    "Deadline",
    "EventRecorder",
    "KubernetesObjectStore",
    "ObjectStore",
]
