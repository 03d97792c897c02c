"""Territory Bounded Context - Capture Session.

Runs the per-fix pipeline for one player's active walk:

    filter -> movement gate -> loop detection -> append or capture

Fixes arrive one at a time from the location subsystem and each is processed
to completion before the next, so the session holds its path without locks.

Captured cell identifiers come from the enclosure engine, which renders every
one with ``grid.format_cell_id``; that function is the single source of cell
ids, so they are recorded and passed to the repository as-is.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

from domain.territory.config import TerritoryConfig, default_config
from domain.territory.errors import SessionFinishedError
from domain.territory.fix_filter import filter_fix
from domain.territory.geometry import distance_m
from domain.territory.loop_detection import detect_closed_loop
from domain.territory.repositories import TerritoryRepository
from domain.territory.simplification import simplify
from domain.territory.value_objects import GeoFix, LoopResult

logger = logging.getLogger(__name__)


class IngestStatus(str, Enum):
    """What happened to a delivered fix."""

    REJECTED = "rejected"  # Dropped by the fix filter
    IGNORED = "ignored"  # Too close to the previous point to record
    APPENDED = "appended"  # Added to the path, no loop
    CAPTURED = "captured"  # Closed a loop; path reset


class IngestResult(BaseModel):
    """Outcome of delivering one raw fix to a session (Value Object)."""

    status: IngestStatus
    fix: GeoFix | None = None  # Filtered fix (None when rejected)
    loop: LoopResult | None = None  # Set only when status is CAPTURED

    model_config = ConfigDict(frozen=True)


class CaptureSession:
    """Mutable state of one capture walk (Entity).

    Parameters
    ----------
    player_id: str
        Identity that captured cells are recorded against.
    config: TerritoryConfig | None
        Engine settings; ``default_config()`` when omitted.
    test_mode: bool
        Scripted playback: fixes bypass the filter and the movement gate
        uses ``test_mode_min_move_m``.
    repository: TerritoryRepository | None
        Ownership store notified on every capture.
    """

    def __init__(
        self,
        player_id: str,
        config: TerritoryConfig | None = None,
        test_mode: bool = False,
        repository: TerritoryRepository | None = None,
    ) -> None:
        self.player_id = player_id
        self.config = config or default_config()
        self.test_mode = test_mode
        self.repository = repository

        self._path: list[GeoFix] = []
        self._captured: set[str] = set()
        self._captures: list[LoopResult] = []
        self.distance_m = 0.0
        self.finished = False

    # -- read-only views ---------------------------------------------------
    @property
    def path(self) -> tuple[GeoFix, ...]:
        return tuple(self._path)

    @property
    def display_path(self) -> list[GeoFix]:
        """Simplified path for map rendering."""
        return simplify(self._path, self.config.rdp_epsilon_deg)

    @property
    def captured_cell_ids(self) -> frozenset[str]:
        return frozenset(self._captured)

    @property
    def captures(self) -> tuple[LoopResult, ...]:
        return tuple(self._captures)

    # -- pipeline ----------------------------------------------------------
    def ingest(self, raw: GeoFix) -> IngestResult:
        """Process one raw fix.

        Raises:
            SessionFinishedError: If ``finish()`` was already called.
        """
        if self.finished:
            raise SessionFinishedError(f"Session for {self.player_id} has finished")

        last = self._path[-1] if self._path else None
        fix = filter_fix(raw, last, self.test_mode, self.config)
        if fix is None:
            return IngestResult(status=IngestStatus.REJECTED)

        if last is None:
            self._path.append(fix)
            return IngestResult(status=IngestStatus.APPENDED, fix=fix)

        moved = distance_m(last, fix)
        min_move = (
            self.config.test_mode_min_move_m if self.test_mode else self.config.min_move_m
        )
        if moved < min_move:
            return IngestResult(status=IngestStatus.IGNORED, fix=fix)

        self.distance_m += moved
        outcome = detect_closed_loop(self._path, fix, self.config)
        if isinstance(outcome, LoopResult):
            self._capture(outcome)
            return IngestResult(status=IngestStatus.CAPTURED, fix=fix, loop=outcome)

        self._path.append(fix)
        return IngestResult(status=IngestStatus.APPENDED, fix=fix)

    def _capture(self, loop: LoopResult) -> None:
        new_cells = loop.enclosed_cell_ids - self._captured
        self._captured |= loop.enclosed_cell_ids
        self._captures.append(loop)

        if self.repository is not None:
            changed = self.repository.claim_cells(
                self.player_id, loop.enclosed_cell_ids, loop.closure_point.timestamp
            )
            logger.debug("Repository reports %d cells changed owner", changed)

        logger.info(
            "Player %s captured %d cells (%d new this session)",
            self.player_id,
            loop.cell_count,
            len(new_cells),
        )
        # New trail starts where the loop closed
        self._path = [loop.closure_point]

    def finish(self) -> None:
        """End the walk; further fixes are refused."""
        self.finished = True
