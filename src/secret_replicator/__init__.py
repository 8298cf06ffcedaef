"""Cross-namespace replication of generated secrets."""

from secret_replicator.__version__ import __version__

__all__ = ["__version__"]
