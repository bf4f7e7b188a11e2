"""Vault core: domain logic and the protocols it depends on."""
