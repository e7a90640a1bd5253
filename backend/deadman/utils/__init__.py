"""Shared helpers: time source, field parsing, storage errors."""
