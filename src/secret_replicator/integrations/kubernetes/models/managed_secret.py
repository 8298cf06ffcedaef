"""ManagedSecret custom resource models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from secret_replicator.integrations.kubernetes.models.base import (
    K8sEntityBase,
    OwnerReference,
    _dict_get,
)


class SecretType(StrEnum):
    """Kinds of ManagedSecret.

    Only ``copy`` matters to replication: a destination ManagedSecret must
    be of that type to receive a replica. The others are produced by the
    generator.
    """

    GENERATED = "generated"
    COPY = "copy"
    PASSWORD = "password"
    RSA = "rsa"
    SSH = "ssh"
    CERTIFICATE = "certificate"
    TLS = "tls"
    BASIC_AUTH = "basic-auth"
    DOCKER_CONFIG_JSON = "dockerconfigjson"
    TEMPLATED = "templated"


class CopyTarget(BaseModel):
    """A declared destination for a replica."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(description="Name of the replica Secret")
    namespace: str = Field(description="Destination namespace")

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class ManagedSecretSpec(BaseModel):
    """Desired state of a ManagedSecret."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    secret_name: str = Field(default="", alias="secretName", description="Generated secret name")
    type: str = Field(default=SecretType.GENERATED.value, description="Secret type")
    copies: list[CopyTarget] = Field(default_factory=list, description="Copy targets, in order")


class ManagedSecretStatus(BaseModel):
    """Observed state of a ManagedSecret."""

    model_config = ConfigDict(extra="ignore")

    generated: bool | None = None
    copied: bool | None = None


class ManagedSecret(K8sEntityBase):
    """A ManagedSecret custom resource."""

    _entity_name: ClassVar[str] = "managedsecret"

    api_version: str | None = Field(default=None, description="apiVersion of the object")
    kind: str = Field(default="ManagedSecret", description="Kind of the object")
    spec: ManagedSecretSpec = Field(default_factory=ManagedSecretSpec)
    status: ManagedSecretStatus = Field(default_factory=ManagedSecretStatus)

    @property
    def is_copy(self) -> bool:
        """Whether this resource accepts replicas from another namespace."""
        return self.spec.type == SecretType.COPY

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> ManagedSecret:
        """Create from a custom object dict returned by CustomObjectsApi."""
        return cls(
            api_version=obj.get("apiVersion"),
            kind=obj.get("kind") or "ManagedSecret",
            name=_dict_get(obj, "metadata", "name", default=""),
            namespace=_dict_get(obj, "metadata", "namespace"),
            uid=_dict_get(obj, "metadata", "uid"),
            resource_version=_dict_get(obj, "metadata", "resourceVersion"),
            labels=dict(_dict_get(obj, "metadata", "labels", default={})),
            annotations=dict(_dict_get(obj, "metadata", "annotations", default={})),
            spec=ManagedSecretSpec.model_validate(obj.get("spec") or {}),
            status=ManagedSecretStatus.model_validate(obj.get("status") or {}),
        )

    def owner_reference(self, *, controller: bool = True) -> OwnerReference:
        """Build an owner reference pointing at this resource."""
        return OwnerReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.name,
            uid=self.uid,
            controller=controller,
            block_owner_deletion=True,
        )
