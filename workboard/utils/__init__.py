"""Shared helpers (error handling, timestamps)."""
