"""Domain Port(s) for territory ownership.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class TerritoryRepository(Protocol):
    """Port for recording which player owns which grid cell.

    Implementations live in infrastructure (e.g., the in-memory adapter).
    """

    def claim_cells(
        self, owner_id: str, cell_ids: Iterable[str], claimed_at_ms: int
    ) -> int:
        """Upsert ownership of ``cell_ids``; return how many changed owner."""
        ...

    def owner_of(self, cell_id: str) -> str | None:
        """Return the current owner of a cell, or None if unclaimed."""
        ...
