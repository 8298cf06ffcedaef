"""Unit tests for KubernetesObjectStore."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from kubernetes.client import (
    ApiException,
    CoreV1Event,
    V1ObjectMeta,
    V1ObjectReference,
    V1Secret,
)

from secret_replicator.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
)
from secret_replicator.integrations.kubernetes.models.managed_secret import ManagedSecret
from secret_replicator.services.kubernetes.deadline import Deadline
from secret_replicator.services.kubernetes.store import KubernetesObjectStore

MANAGED_SECRET_OBJ = {
    "apiVersion": "secretreplicator.io/v1alpha1",
    "kind": "ManagedSecret",
    "metadata": {
        "name": "db.qsec",
        "namespace": "tenant-a",
        "uid": "uid-1",
        "resourceVersion": "7",
        "annotations": {"secretreplicator.io/secret-copy-of": "tenant-b/db.qsec"},
    },
    "spec": {
        "secretName": "db-password",
        "type": "password",
        "copies": [{"name": "db-password", "namespace": "tenant-a-copy"}],
    },
    "status": {"generated": True},
}


@pytest.fixture
def store(mock_k8s_client: MagicMock) -> KubernetesObjectStore:
    """Create a KubernetesObjectStore with mocked client."""
    return KubernetesObjectStore(mock_k8s_client)


@pytest.fixture
def expired() -> Deadline:
    """A deadline that has already passed."""
    return Deadline(expires_at=0.0, timeout=5)


def _secret(name: str = "db-password", namespace: str = "tenant-a") -> V1Secret:
    return V1Secret(metadata=V1ObjectMeta(name=name, namespace=namespace, resource_version="3"))


class TestSecretOperations:
    """Tests for Secret operations."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_get_secret_success(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should read the Secret with the remaining time as timeout."""
        expected = _secret()
        mock_k8s_client.core_v1.read_namespaced_secret.return_value = expected

        result = store.get_secret("tenant-a", "db-password", deadline)

        assert result is expected
        kwargs = mock_k8s_client.core_v1.read_namespaced_secret.call_args.kwargs
        assert kwargs["name"] == "db-password"
        assert kwargs["namespace"] == "tenant-a"
        assert 0 < kwargs["_request_timeout"] <= 60

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_get_secret_not_found(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should translate 404 into KubernetesNotFoundError."""
        mock_k8s_client.core_v1.read_namespaced_secret.side_effect = ApiException(
            status=404, reason="Not Found"
        )

        with pytest.raises(KubernetesNotFoundError) as exc_info:
            store.get_secret("tenant-a", "missing", deadline)

        assert exc_info.value.resource_type == "Secret"
        assert exc_info.value.namespace == "tenant-a"

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_get_secret_forbidden(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should translate 403 into KubernetesAuthError."""
        mock_k8s_client.core_v1.read_namespaced_secret.side_effect = ApiException(
            status=403, reason="Forbidden"
        )

        with pytest.raises(KubernetesAuthError):
            store.get_secret("tenant-a", "db-password", deadline)

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_expired_deadline_skips_call(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, expired: Deadline
    ) -> None:
        """Should not call the API once the deadline has passed."""
        with pytest.raises(KubernetesTimeoutError):
            store.get_secret("tenant-a", "db-password", expired)

        mock_k8s_client.core_v1.read_namespaced_secret.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_create_secret_uses_metadata_namespace(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should create the Secret in the namespace of its metadata."""
        secret = _secret(namespace="tenant-a-copy")

        store.create_secret(secret, deadline)

        kwargs = mock_k8s_client.core_v1.create_namespaced_secret.call_args.kwargs
        assert kwargs["namespace"] == "tenant-a-copy"
        assert kwargs["body"] is secret

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_create_secret_conflict(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should translate 409 into KubernetesConflictError."""
        mock_k8s_client.core_v1.create_namespaced_secret.side_effect = ApiException(
            status=409, reason="AlreadyExists"
        )

        with pytest.raises(KubernetesConflictError):
            store.create_secret(_secret(), deadline)

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_update_secret_replaces(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should replace the Secret, sending its resourceVersion along."""
        secret = _secret()

        store.update_secret(secret, deadline)

        kwargs = mock_k8s_client.core_v1.replace_namespaced_secret.call_args.kwargs
        assert kwargs["name"] == "db-password"
        assert kwargs["body"].metadata.resource_version == "3"

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_update_secret_stale_version(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should surface a stale resourceVersion as a conflict."""
        mock_k8s_client.core_v1.replace_namespaced_secret.side_effect = ApiException(
            status=409, reason="Conflict"
        )

        with pytest.raises(KubernetesConflictError):
            store.update_secret(_secret(), deadline)


class TestManagedSecretOperations:
    """Tests for ManagedSecret operations."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_get_managed_secret(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should read the custom object and parse it."""
        mock_k8s_client.custom_objects.get_namespaced_custom_object.return_value = (
            MANAGED_SECRET_OBJ
        )

        result = store.get_managed_secret("tenant-a", "db.qsec", deadline)

        assert isinstance(result, ManagedSecret)
        assert result.spec.secret_name == "db-password"
        assert result.spec.copies[0].namespace == "tenant-a-copy"
        assert result.status.generated is True
        args = mock_k8s_client.custom_objects.get_namespaced_custom_object.call_args.args
        assert args == ("secretreplicator.io", "v1alpha1", "tenant-a", "managedsecrets", "db.qsec")

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_get_managed_secret_fills_api_version(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should default apiVersion from the resource coordinates."""
        obj = {k: v for k, v in MANAGED_SECRET_OBJ.items() if k != "apiVersion"}
        mock_k8s_client.custom_objects.get_namespaced_custom_object.return_value = obj

        result = store.get_managed_secret("tenant-a", "db.qsec", deadline)

        assert result.api_version == "secretreplicator.io/v1alpha1"

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_get_managed_secret_not_found(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should translate 404 with the resource kind."""
        mock_k8s_client.custom_objects.get_namespaced_custom_object.side_effect = ApiException(
            status=404, reason="Not Found"
        )

        with pytest.raises(KubernetesNotFoundError) as exc_info:
            store.get_managed_secret("tenant-a", "db.qsec", deadline)

        assert exc_info.value.resource_type == "ManagedSecret"

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_get_managed_secret_malformed(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should raise a validation error for an object that does not parse."""
        obj = {**MANAGED_SECRET_OBJ, "spec": {"type": "copy", "copies": [{"name": "x"}]}}
        mock_k8s_client.custom_objects.get_namespaced_custom_object.return_value = obj

        with pytest.raises(KubernetesValidationError) as exc_info:
            store.get_managed_secret("tenant-a", "db.qsec", deadline)

        assert "tenant-a/db.qsec" in str(exc_info.value)
        assert exc_info.value.validation_errors == {"copies.0.namespace": "Field required"}

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_patch_status(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should merge-patch only the given status fields."""
        managed = ManagedSecret.from_k8s_object(MANAGED_SECRET_OBJ)

        store.patch_managed_secret_status(managed, {"copied": False}, deadline)

        call = mock_k8s_client.custom_objects.patch_namespaced_custom_object_status.call_args
        assert call.args == (
            "secretreplicator.io",
            "v1alpha1",
            "tenant-a",
            "managedsecrets",
            "db.qsec",
            {"status": {"copied": False}},
        )
        assert "_request_timeout" in call.kwargs


class TestEventOperations:
    """Tests for Event operations."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_create_event(
        self, store: KubernetesObjectStore, mock_k8s_client: MagicMock, deadline: Deadline
    ) -> None:
        """Should create the Event in its own namespace."""
        event = CoreV1Event(
            metadata=V1ObjectMeta(name="db.qsec.abc", namespace="tenant-a"),
            involved_object=V1ObjectReference(name="db.qsec"),
        )

        store.create_event(event, deadline)

        kwargs = mock_k8s_client.core_v1.create_namespaced_event.call_args.kwargs
        assert kwargs["namespace"] == "tenant-a"
        assert kwargs["body"] is event
