"""Unit tests for Deadline."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from secret_replicator.integrations.kubernetes.exceptions import KubernetesTimeoutError
from secret_replicator.services.kubernetes.deadline import Deadline

MONOTONIC = "secret_replicator.services.kubernetes.deadline.time.monotonic"


class TestDeadline:
    """Tests for the per-pass deadline."""

    @pytest.mark.unit
    def test_after_sets_expiry(self) -> None:
        """Should expire timeout seconds after creation."""
        with patch(MONOTONIC, return_value=100.0):
            deadline = Deadline.after(30)

        assert deadline.expires_at == 130.0
        assert deadline.timeout == 30

    @pytest.mark.unit
    def test_remaining_counts_down(self) -> None:
        """Should report the seconds left."""
        deadline = Deadline(expires_at=130.0, timeout=30)

        with patch(MONOTONIC, return_value=120.0):
            assert deadline.remaining() == 10.0
            assert deadline.expired is False

    @pytest.mark.unit
    def test_remaining_never_negative(self) -> None:
        """Should clamp at zero once expired."""
        deadline = Deadline(expires_at=130.0, timeout=30)

        with patch(MONOTONIC, return_value=200.0):
            assert deadline.remaining() == 0.0
            assert deadline.expired is True

    @pytest.mark.unit
    def test_check_returns_remaining(self) -> None:
        """Should hand out the remaining time as request timeout."""
        deadline = Deadline(expires_at=130.0, timeout=30)

        with patch(MONOTONIC, return_value=125.0):
            assert deadline.check("reading Secret") == 5.0

    @pytest.mark.unit
    def test_check_raises_when_expired(self) -> None:
        """Should raise a timeout naming the blocked operation."""
        deadline = Deadline(expires_at=130.0, timeout=30)

        with (
            patch(MONOTONIC, return_value=130.0),
            pytest.raises(KubernetesTimeoutError, match="before reading Secret") as exc_info,
        ):
            deadline.check("reading Secret")

        assert exc_info.value.timeout_seconds == 30

    @pytest.mark.unit
    def test_is_immutable(self) -> None:
        """Should not allow moving the deadline."""
        deadline = Deadline.after(30)

        with pytest.raises(AttributeError):
            deadline.expires_at = 0  # type: ignore[misc]
