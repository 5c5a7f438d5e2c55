"""Shared API helpers (request validation)."""
