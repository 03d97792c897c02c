"""Infrastructure adapters for the territory bounded context.

Adapter exported for simplified imports.
"""

from .memory_repository import CellOwnership, InMemoryTerritoryRepository

__all__ = ["CellOwnership", "InMemoryTerritoryRepository"]
