"""Domain models, exceptions and ports for network interface reconciliation."""
