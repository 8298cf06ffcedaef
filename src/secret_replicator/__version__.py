"""Version information for secret_replicator."""

__version__ = "0.1.0"
