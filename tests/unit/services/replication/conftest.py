"""Shared fixtures for replication tests."""

from __future__ import annotations

import pytest
from kubernetes.client import V1Secret

from secret_replicator.integrations.kubernetes.config import ResourceConfig
from secret_replicator.integrations.kubernetes.models.managed_secret import (
    CopyTarget,
    ManagedSecret,
)
from secret_replicator.services.kubernetes.deadline import Deadline
from tests.fakes import FakeObjectStore, b64

SOURCE_NS = "tenant-a"
TARGET_NS = "tenant-a-copy"
QSEC_NAME = "test.qsec"
SOURCE_SECRET = "generated-secret"
COPY_SECRET = "generated-secret-copy"


@pytest.fixture
def resource() -> ResourceConfig:
    """Default ManagedSecret coordinates."""
    return ResourceConfig()


@pytest.fixture
def copy_of(resource: ResourceConfig) -> str:
    """The copy-of annotation key."""
    return resource.copy_of_annotation


@pytest.fixture
def secret_kind(resource: ResourceConfig) -> str:
    """The secret-kind label key."""
    return resource.secret_kind_label


@pytest.fixture
def store() -> FakeObjectStore:
    """Empty in-memory cluster."""
    return FakeObjectStore()


@pytest.fixture
def deadline() -> Deadline:
    """A deadline far enough away for any unit test."""
    return Deadline.after(60)


@pytest.fixture
def target() -> CopyTarget:
    """The copy target declared by the source ManagedSecret."""
    return CopyTarget(name=COPY_SECRET, namespace=TARGET_NS)


@pytest.fixture
def source(store: FakeObjectStore, target: CopyTarget) -> ManagedSecret:
    """Source ManagedSecret declaring one copy."""
    return store.add_managed_secret(
        SOURCE_NS,
        QSEC_NAME,
        secret_type="password",
        secret_name=SOURCE_SECRET,
        copies=[target],
    )


@pytest.fixture
def source_secret(store: FakeObjectStore, secret_kind: str) -> V1Secret:
    """Generated source Secret holding a password."""
    return store.add_secret(
        SOURCE_NS,
        SOURCE_SECRET,
        data={"password": b64("securepassword")},
        labels={secret_kind: "generated"},
    )
