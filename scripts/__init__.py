"""Helper scripts for running the test suites."""
