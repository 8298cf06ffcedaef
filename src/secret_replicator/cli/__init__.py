"""Command line interface for secret_replicator."""
