"""Deadman - dead man's switch monitoring for recurring jobs."""
