"""Service layer for secret_replicator."""
