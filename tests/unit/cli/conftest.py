"""Shared fixtures for CLI tests."""

from __future__ import annotations

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest
import structlog

from secret_replicator.integrations.kubernetes.config import ReplicatorConfig
from tests.fakes import FakeObjectStore


@pytest.fixture(autouse=True)
def captured_logs() -> Generator[list[dict]]:
    """Capture log events so they stay out of command output."""
    with structlog.testing.capture_logs() as logs:
        yield logs


@pytest.fixture(autouse=True)
def mock_configure_logging() -> Generator[MagicMock]:
    """Keep CLI tests from touching the real log directory."""
    with patch("secret_replicator.cli.main.configure_logging") as mock:
        yield mock


def _client_for(config: ReplicatorConfig) -> MagicMock:
    client = MagicMock()
    client.resource = config.resource
    client.ctx_timeout = config.defaults.ctx_timeout
    client.__enter__.return_value = client
    return client


@pytest.fixture
def mock_client_cls() -> Generator[MagicMock]:
    """Patch KubernetesClient in the reconcile command.

    The fake client exposes the resource coordinates and timeout of the
    configuration it is built from.
    """
    with patch("secret_replicator.cli.commands.reconcile.KubernetesClient") as mock:
        mock.side_effect = _client_for
        yield mock


@pytest.fixture
def fake_store(mock_client_cls: MagicMock) -> Generator[FakeObjectStore]:
    """Route the reconcile command to an in-memory cluster."""
    store = FakeObjectStore()
    with patch(
        "secret_replicator.cli.commands.reconcile.KubernetesObjectStore", return_value=store
    ):
        yield store
