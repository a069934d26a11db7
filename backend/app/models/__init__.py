"""Models package."""
from app.models.record import Record

__all__ = ["Record"]
