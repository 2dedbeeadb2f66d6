"""Route group exports."""

from . import auth, health, records, regions

__all__ = ["auth", "health", "records", "regions"]
