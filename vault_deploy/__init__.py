"""Vault and strategy deployment and test funding tooling."""
