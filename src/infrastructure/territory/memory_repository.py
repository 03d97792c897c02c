"""In-memory adapter for TerritoryRepository.

Keeps cell ownership in a dict keyed by cell id, with last-writer-wins
upsert semantics: claiming a cell overwrites its owner and timestamp.
Intended for tests, simulations and single-process deployments.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class CellOwnership(BaseModel):
    """Stored ownership record of one cell."""

    owner_id: str = Field(min_length=1)
    updated_at_ms: int

    model_config = ConfigDict(frozen=True)


class InMemoryTerritoryRepository:
    """Dict-backed implementation of the TerritoryRepository port."""

    def __init__(self) -> None:
        self._cells: dict[str, CellOwnership] = {}

    def claim_cells(
        self, owner_id: str, cell_ids: Iterable[str], claimed_at_ms: int
    ) -> int:
        """Upsert ownership of every cell; return how many changed owner."""
        changed = 0
        record = CellOwnership(owner_id=owner_id, updated_at_ms=claimed_at_ms)
        for cell_id in cell_ids:
            previous = self._cells.get(cell_id)
            if previous is None or previous.owner_id != owner_id:
                changed += 1
            self._cells[cell_id] = record
        logger.debug("Owner %s claimed cells (%d changed owner)", owner_id, changed)
        return changed

    def owner_of(self, cell_id: str) -> str | None:
        record = self._cells.get(cell_id)
        return record.owner_id if record is not None else None

    def get(self, cell_id: str) -> CellOwnership | None:
        return self._cells.get(cell_id)

    def cells_owned_by(self, owner_id: str) -> frozenset[str]:
        return frozenset(
            cell_id for cell_id, rec in self._cells.items() if rec.owner_id == owner_id
        )

    def __len__(self) -> int:
        return len(self._cells)
