"""Territory Bounded Context - Value Objects.

Immutable data structures representing fixes, extents and capture outcomes.
All validation occurs at construction time via Pydantic.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# GeoFix
# ---------------------------------------------------------------------------
class GeoFix(BaseModel):
    """Single location sample in WGS84 (Value Object).

    The unit of all territory geometry: raw sensor fixes, smoothed path
    points, polygon vertices and closure points are all GeoFix instances.

    Invariants:
        GF-1: lat in [-90, 90]
        GF-2: lng in [-180, 180]
        GF-3: accuracy, when present, is >= 0 (meters)
    """

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    accuracy: float | None = Field(default=None, ge=0)  # Reported error radius (m)
    timestamp: int = 0  # Epoch milliseconds

    model_config = ConfigDict(frozen=True)

    def same_position(self, other: GeoFix) -> bool:
        """Return True if both fixes share exactly the same coordinates."""
        return self.lat == other.lat and self.lng == other.lng


# ---------------------------------------------------------------------------
# BoundingBox
# ---------------------------------------------------------------------------
class BoundingBox(BaseModel):
    """Geographic extent in degrees (Value Object).

    Unlike a raster extent, a box may be degenerate (zero width or height):
    the loop detector measures exactly such boxes to reject collinear loops.
    """

    min_lat: float  # Southern boundary
    min_lng: float  # Western boundary
    max_lat: float  # Northern boundary
    max_lng: float  # Eastern boundary

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_bounds(self) -> "BoundingBox":
        if not (-90 <= self.min_lat <= 90) or not (-90 <= self.max_lat <= 90):
            raise ValueError(
                f"Latitude out of range: [{self.min_lat}, {self.max_lat}]"
            )
        if not (-180 <= self.min_lng <= 180) or not (-180 <= self.max_lng <= 180):
            raise ValueError(
                f"Longitude out of range: [{self.min_lng}, {self.max_lng}]"
            )
        if self.min_lat > self.max_lat:
            raise ValueError(
                f"Invalid lat ordering: min_lat={self.min_lat} > max_lat={self.max_lat}"
            )
        if self.min_lng > self.max_lng:
            raise ValueError(
                f"Invalid lng ordering: min_lng={self.min_lng} > max_lng={self.max_lng}"
            )
        return self

    def contains(self, lat: float, lng: float) -> bool:
        """Check if a coordinate lies within the box (inclusive)."""
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lng <= lng <= self.max_lng
        )


# ---------------------------------------------------------------------------
# Loop outcomes
# ---------------------------------------------------------------------------
class ClosureStrategy(str, Enum):
    """How a loop was closed."""

    SNAP_TO_START = "snap_to_start"
    SELF_INTERSECTION = "self_intersection"
    PROXIMITY = "proximity"


class NoLoopReason(str, Enum):
    """Why no loop was reported for a fix."""

    PATH_TOO_SHORT = "path_too_short"
    NO_VALID_CANDIDATE = "no_valid_candidate"


class LoopResult(BaseModel):
    """A validated closed loop and the grid cells it encloses (Value Object).

    Produced once per closure event and handed to rendering and persistence
    collaborators. ``enclosed_cell_ids`` is a set: consumers must not rely on
    iteration order.

    Invariants:
        LR-1: polygon has at least 4 points (a closed triangle)
        LR-2: polygon[0] and polygon[-1] share the same coordinates
        LR-3: enclosed_cell_ids is non-empty
        LR-4: perimeter_m > 0
    """

    kind: Literal["loop"] = "loop"
    polygon: tuple[GeoFix, ...]
    enclosed_cell_ids: frozenset[str]
    closure_point: GeoFix
    strategy: ClosureStrategy
    perimeter_m: float = Field(gt=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_loop(self) -> "LoopResult":
        # LR-1
        if len(self.polygon) < 4:
            raise ValueError(
                f"Polygon must have >= 4 points, got {len(self.polygon)}"
            )
        # LR-2
        if not self.polygon[0].same_position(self.polygon[-1]):
            raise ValueError("Polygon must be closed (first point == last point)")
        # LR-3
        if not self.enclosed_cell_ids:
            raise ValueError("Loop must enclose at least one cell")
        return self

    @property
    def cell_count(self) -> int:
        return len(self.enclosed_cell_ids)


class NoLoop(BaseModel):
    """Absence of a loop for the evaluated fix (Value Object)."""

    kind: Literal["none"] = "none"
    reason: NoLoopReason

    model_config = ConfigDict(frozen=True)


LoopOutcome = Union[LoopResult, NoLoop]
