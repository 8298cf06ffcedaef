"""Logging configuration for secret_replicator."""

from secret_replicator.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
