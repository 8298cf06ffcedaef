"""Per-pass deadline shared by every API call of one reconciliation."""

from __future__ import annotations

import time
from dataclasses import dataclass

from secret_replicator.integrations.kubernetes.exceptions import KubernetesTimeoutError


@dataclass(frozen=True)
class Deadline:
    """Absolute point in time after which a pass stops talking to the API.

    Built once per pass from the configured timeout and handed to every
    store call, which uses the remaining time as its request timeout.
    """

    expires_at: float
    timeout: float

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        """Create a deadline ``seconds`` from now."""
        return cls(expires_at=time.monotonic() + seconds, timeout=seconds)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self, operation: str = "request") -> float:
        """Return the remaining seconds, raising once the deadline passed.

        Raises:
            KubernetesTimeoutError: If no time is left.
        """
        remaining = self.remaining()
        if remaining <= 0:
            raise KubernetesTimeoutError(
                message=f"Deadline exceeded before {operation}",
                timeout_seconds=self.timeout,
            )
        return remaining
