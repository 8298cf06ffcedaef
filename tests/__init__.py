"""Test suite for secret_replicator."""
