"""Inbound request shapes consumed from the HTTP layer."""
