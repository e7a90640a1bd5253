"""Database models."""
from .record import RecordRow

__all__ = ["RecordRow"]
