"""Shared fixtures for Kubernetes service tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from secret_replicator.integrations.kubernetes.client import KubernetesClient
from secret_replicator.integrations.kubernetes.config import ResourceConfig
from secret_replicator.services.kubernetes.deadline import Deadline


@pytest.fixture
def mock_k8s_client() -> MagicMock:
    """Create a mock Kubernetes client with API sub-mocks.

    Error translation uses the real implementation so managers raise the
    same exceptions they would against a live cluster.
    """
    mock_client = MagicMock()
    mock_client.resource = ResourceConfig()
    mock_client.translate_api_exception.side_effect = KubernetesClient.translate_api_exception
    return mock_client


@pytest.fixture
def deadline() -> Deadline:
    """A deadline far enough away for any unit test."""
    return Deadline.after(60)
