"""Territory Bounded Context - Error Hierarchy.

Geometry operations signal "nothing found" with absence results (``None`` or
``NoLoop``), never with exceptions. The errors below cover misuse of the
surrounding API only.
"""

from __future__ import annotations


class TerritoryError(Exception):
    """Base error for territory operations."""


class InvalidCellIdError(TerritoryError):
    """Cell identifier is malformed or not aligned to the grid.

    Attributes:
        cell_id: The offending identifier
    """

    def __init__(self, cell_id: str, detail: str) -> None:
        self.cell_id = cell_id
        super().__init__(f"Invalid cell id {cell_id!r}: {detail}")


class SessionFinishedError(TerritoryError):
    """A fix was delivered to a capture session that has already finished."""
