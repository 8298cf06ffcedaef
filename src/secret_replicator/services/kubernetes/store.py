"""Cluster object store used by the copy controller.

Every read goes straight to the API server. The controller keeps no cache
of destination objects, so a write is never skipped because of a stale
local view.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError

from secret_replicator.integrations.kubernetes.exceptions import KubernetesValidationError
from secret_replicator.integrations.kubernetes.models.managed_secret import ManagedSecret
from secret_replicator.services.kubernetes.base import K8sBaseManager

if TYPE_CHECKING:
    from kubernetes.client import CoreV1Event, V1Secret

    from secret_replicator.services.kubernetes.deadline import Deadline


class ObjectStore(Protocol):
    """The cluster reads and writes the copy controller relies on.

    Implementations raise ``KubernetesNotFoundError`` for missing objects
    and other ``KubernetesError`` subclasses for transport or API failures.
    Every call is bounded by the given deadline.
    """

    def get_secret(self, namespace: str, name: str, deadline: Deadline) -> V1Secret: ...

    def get_managed_secret(
        self, namespace: str, name: str, deadline: Deadline
    ) -> ManagedSecret: ...

    def create_secret(self, secret: V1Secret, deadline: Deadline) -> V1Secret: ...

    def update_secret(self, secret: V1Secret, deadline: Deadline) -> V1Secret: ...

    def patch_managed_secret_status(
        self, resource: ManagedSecret, status: dict[str, Any], deadline: Deadline
    ) -> None: ...

    def create_event(self, event: CoreV1Event, deadline: Deadline) -> None: ...


class KubernetesObjectStore(K8sBaseManager):
    """ObjectStore backed by the Kubernetes API.

    Secrets go through ``CoreV1Api``; ManagedSecrets through
    ``CustomObjectsApi`` using the configured resource coordinates.
    """

    _entity_name = "object_store"

    # =========================================================================
    # Secret Operations
    # =========================================================================

    def get_secret(self, namespace: str, name: str, deadline: Deadline) -> V1Secret:
        """Read a Secret.

        Raises:
            KubernetesNotFoundError: If the Secret does not exist.
        """
        timeout = deadline.check("reading Secret")
        self._log.debug("getting_secret", name=name, namespace=namespace)
        try:
            return self._client.core_v1.read_namespaced_secret(
                name=name, namespace=namespace, _request_timeout=timeout
            )
        except Exception as e:
            self._handle_api_error(e, "Secret", name, namespace)

    def create_secret(self, secret: V1Secret, deadline: Deadline) -> V1Secret:
        """Create a Secret in the namespace set on its metadata."""
        name = secret.metadata.name
        ns = secret.metadata.namespace
        timeout = deadline.check("creating Secret")
        self._log.debug("creating_secret", name=name, namespace=ns)
        try:
            result = self._client.core_v1.create_namespaced_secret(
                namespace=ns, body=secret, _request_timeout=timeout
            )
            self._log.info("created_secret", name=name, namespace=ns)
            return result
        except Exception as e:
            self._handle_api_error(e, "Secret", name, ns)

    def update_secret(self, secret: V1Secret, deadline: Deadline) -> V1Secret:
        """Replace a Secret.

        The update is conditional when the body carries a resourceVersion
        and unconditional otherwise.

        Raises:
            KubernetesNotFoundError: If the Secret no longer exists.
            KubernetesConflictError: If the resourceVersion is stale.
        """
        name = secret.metadata.name
        ns = secret.metadata.namespace
        timeout = deadline.check("updating Secret")
        self._log.debug("updating_secret", name=name, namespace=ns)
        try:
            result = self._client.core_v1.replace_namespaced_secret(
                name=name, namespace=ns, body=secret, _request_timeout=timeout
            )
            self._log.info("updated_secret", name=name, namespace=ns)
            return result
        except Exception as e:
            self._handle_api_error(e, "Secret", name, ns)

    # =========================================================================
    # ManagedSecret Operations
    # =========================================================================

    def get_managed_secret(self, namespace: str, name: str, deadline: Deadline) -> ManagedSecret:
        """Read a ManagedSecret.

        Raises:
            KubernetesNotFoundError: If the resource does not exist.
            KubernetesValidationError: If the stored object cannot be parsed.
        """
        resource = self._client.resource
        timeout = deadline.check(f"reading {resource.kind}")
        self._log.debug("getting_managed_secret", name=name, namespace=namespace)
        try:
            result = self._client.custom_objects.get_namespaced_custom_object(
                resource.group,
                resource.version,
                namespace,
                resource.plural,
                name,
                _request_timeout=timeout,
            )
        except Exception as e:
            self._handle_api_error(e, resource.kind, name, namespace)

        try:
            managed = ManagedSecret.from_k8s_object(result)
        except ValidationError as e:
            self._log.warning(
                "invalid_managed_secret", name=name, namespace=namespace, errors=e.error_count()
            )
            raise KubernetesValidationError(
                message=f"{resource.kind} {namespace}/{name} does not match the expected schema",
                validation_errors={
                    ".".join(str(loc) for loc in err["loc"]): err["msg"] for err in e.errors()
                },
                status_code=None,
            ) from e
        if not managed.api_version:
            managed.api_version = resource.api_version
        return managed

    def patch_managed_secret_status(
        self, resource: ManagedSecret, status: dict[str, Any], deadline: Deadline
    ) -> None:
        """Merge-patch the status sub-resource of a ManagedSecret."""
        coords = self._client.resource
        timeout = deadline.check(f"patching {coords.kind} status")
        self._log.debug(
            "patching_managed_secret_status",
            name=resource.name,
            namespace=resource.namespace,
            status=status,
        )
        try:
            self._client.custom_objects.patch_namespaced_custom_object_status(
                coords.group,
                coords.version,
                resource.namespace,
                coords.plural,
                resource.name,
                {"status": status},
                _request_timeout=timeout,
            )
        except Exception as e:
            self._handle_api_error(e, coords.kind, resource.name, resource.namespace)

    # =========================================================================
    # Event Operations
    # =========================================================================

    def create_event(self, event: CoreV1Event, deadline: Deadline) -> None:
        """Create an Event in the namespace set on its metadata."""
        ns = event.metadata.namespace
        timeout = deadline.check("creating Event")
        try:
            self._client.core_v1.create_namespaced_event(
                namespace=ns, body=event, _request_timeout=timeout
            )
        except Exception as e:
            self._handle_api_error(e, "Event", event.metadata.name, ns)
