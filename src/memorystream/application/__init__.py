"""Application services wiring the vault together."""
