"""Infrastructure layer implementations."""

from pharmstock.infrastructure import storage

__all__ = ["storage"]
