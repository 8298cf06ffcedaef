"""Shared pytest fixtures for secret_replicator tests."""

from __future__ import annotations

import os

import pytest
from typer.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear SECRET_REPLICATOR_ prefixed environment variables for each test."""
    for key in list(os.environ.keys()):
        if key.startswith("SECRET_REPLICATOR_"):
            monkeypatch.delenv(key, raising=False)
