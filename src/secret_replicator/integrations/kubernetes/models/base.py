"""Base models for Kubernetes resources."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class K8sEntityBase(BaseModel):
    """Base class for Kubernetes object models."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    name: str = Field(description="Resource name")
    namespace: str | None = Field(default=None, description="Resource namespace")
    uid: str | None = Field(default=None, description="Kubernetes UID")
    resource_version: str | None = Field(default=None, description="Optimistic lock version")
    labels: dict[str, str] = Field(default_factory=dict, description="Resource labels")
    annotations: dict[str, str] = Field(default_factory=dict, description="Resource annotations")

    _entity_name: ClassVar[str] = "entity"

    @property
    def namespaced_name(self) -> str:
        """Return ``namespace/name``, the identity used in copy-of annotations."""
        return f"{self.namespace}/{self.name}"


class OwnerReference(BaseModel):
    """Kubernetes owner reference."""

    model_config = ConfigDict(extra="ignore")

    api_version: str | None = None
    kind: str | None = None
    name: str | None = None
    uid: str | None = None
    controller: bool | None = None
    block_owner_deletion: bool | None = None

    @classmethod
    def from_k8s_object(cls, obj: Any) -> OwnerReference:
        """Create from a kubernetes V1OwnerReference object or dict."""
        if obj is None:
            return cls()
        if isinstance(obj, dict):
            return cls(
                api_version=obj.get("apiVersion"),
                kind=obj.get("kind"),
                name=obj.get("name"),
                uid=obj.get("uid"),
                controller=obj.get("controller"),
                block_owner_deletion=obj.get("blockOwnerDeletion"),
            )
        return cls(
            api_version=getattr(obj, "api_version", None),
            kind=getattr(obj, "kind", None),
            name=getattr(obj, "name", None),
            uid=getattr(obj, "uid", None),
            controller=getattr(obj, "controller", None),
            block_owner_deletion=getattr(obj, "block_owner_deletion", None),
        )

    def to_k8s_object(self) -> Any:
        """Build the kubernetes V1OwnerReference for this reference."""
        from kubernetes.client import V1OwnerReference

        return V1OwnerReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.name,
            uid=self.uid,
            controller=self.controller,
            block_owner_deletion=self.block_owner_deletion,
        )


def _safe_get(obj: Any, *attrs: str, default: Any = None) -> Any:
    """Safely traverse nested attributes on kubernetes SDK objects."""
    current = obj
    for attr in attrs:
        if current is None:
            return default
        current = getattr(current, attr, None)
    return current if current is not None else default


def _dict_get(obj: dict[str, Any] | None, *keys: str, default: Any = None) -> Any:
    """Safely traverse nested keys on custom object dicts."""
    current: Any = obj
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
    return current if current is not None else default


def _get_labels(obj: Any) -> dict[str, str]:
    """Extract labels dict from an SDK object, empty if unset."""
    labels = _safe_get(obj, "metadata", "labels")
    return dict(labels) if labels else {}


def _get_annotations(obj: Any) -> dict[str, str]:
    """Extract annotations dict from an SDK object, empty if unset."""
    annotations = _safe_get(obj, "metadata", "annotations")
    return dict(annotations) if annotations else {}
