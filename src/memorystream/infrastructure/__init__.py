"""Concrete adapters: cryptography and in-memory persistence."""
