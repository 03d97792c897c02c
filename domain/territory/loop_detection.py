"""Territory Bounded Context - Loop Detector.

Decides whether a new fix closes a loop in the accumulated path. Candidate
polygons come from three strategies tried in order:

1. snap-to-start: the player walked back to where the path began
2. self-intersection: the newest edge crosses an earlier edge
3. proximity: the new fix lands close to an earlier fix (GPS noise kept an
   exact crossing from registering)

Every candidate goes through the same validation; the first one to pass is
returned. The input path is never mutated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from domain.territory.config import TerritoryConfig, default_config
from domain.territory.enclosure import enclosed_cells
from domain.territory.geometry import (
    bbox_size_m,
    bounding_box,
    distance_m,
    path_length_m,
    segment_intersection,
)
from domain.territory.value_objects import (
    ClosureStrategy,
    GeoFix,
    LoopOutcome,
    LoopResult,
    NoLoop,
    NoLoopReason,
)

logger = logging.getLogger(__name__)

MIN_PATH_POINTS = 3

Candidate = tuple[ClosureStrategy, list[GeoFix], GeoFix]


# ---------------------------------------------------------------------------
# Polygon cleaning
# ---------------------------------------------------------------------------
def _near(a: GeoFix, b: GeoFix, eps: float) -> bool:
    return abs(a.lat - b.lat) < eps and abs(a.lng - b.lng) < eps


def clean_polygon(points: Sequence[GeoFix], eps: float) -> list[GeoFix]:
    """Drop consecutive near-duplicates and force strict closure.

    The returned ring ends with a point whose coordinates equal the first
    point exactly. Returns an empty list when fewer than three distinct
    vertices remain.
    """
    if len(points) < 3:
        return []

    result = [points[0]]
    for p in points[1:]:
        if not _near(result[-1], p, eps):
            result.append(p)

    first = result[0]
    if len(result) > 1 and _near(result[-1], first, eps):
        result.pop()
    # Distinct vertices only at this point; need a triangle at least
    if len(result) < 3:
        return []
    result.append(first.model_copy())
    return result


# ---------------------------------------------------------------------------
# Candidate generation
# ---------------------------------------------------------------------------
def _candidates(
    path: Sequence[GeoFix], new_fix: GeoFix, cfg: TerritoryConfig
) -> Iterator[Candidate]:
    """Yield candidate polygons in strategy priority order (lazily)."""
    start = path[0]
    last = path[-1]

    # 1. Snap-to-start
    if distance_m(new_fix, start) <= cfg.snap_to_start_m:
        yield ClosureStrategy.SNAP_TO_START, [*path, start], start

    searchable = len(path) - cfg.loop_safety_buffer

    # 2. Self-intersection: newest earlier edge first (smallest loop). The
    # newest searchable edge keeps its end vertex, whose successor edge lies
    # inside the buffer.
    for i in range(searchable - 2, -1, -1):
        crossing = segment_intersection(
            last, new_fix, path[i], path[i + 1], closed_end=(i == searchable - 2)
        )
        if crossing is None:
            continue
        x = GeoFix(lat=crossing[0], lng=crossing[1], timestamp=new_fix.timestamp)
        yield ClosureStrategy.SELF_INTERSECTION, [x, *path[i + 1 :], x], x

    # 3. Proximity snap: oldest point first (largest loop)
    for i in range(max(searchable, 0)):
        anchor = path[i]
        if distance_m(new_fix, anchor) <= cfg.proximity_snap_m:
            yield ClosureStrategy.PROXIMITY, [*path[i:], new_fix, anchor], anchor


# ---------------------------------------------------------------------------
# Candidate validation
# ---------------------------------------------------------------------------
def _validate(
    strategy: ClosureStrategy,
    raw_polygon: list[GeoFix],
    closure_point: GeoFix,
    cfg: TerritoryConfig,
) -> LoopResult | None:
    polygon = clean_polygon(raw_polygon, cfg.clean_epsilon_deg)
    if not polygon:
        logger.debug("Rejected %s candidate: degenerate polygon", strategy.value)
        return None

    perimeter = path_length_m(polygon)
    if perimeter < cfg.min_loop_perimeter_m:
        logger.debug(
            "Rejected %s candidate: perimeter %.1fm < %.1fm",
            strategy.value,
            perimeter,
            cfg.min_loop_perimeter_m,
        )
        return None

    cells = enclosed_cells(polygon, cfg)
    if len(cells) < cfg.min_enclosed_cells:
        logger.debug(
            "Rejected %s candidate: %d enclosed cells < %d",
            strategy.value,
            len(cells),
            cfg.min_enclosed_cells,
        )
        return None

    width, height = bbox_size_m(bounding_box(polygon))
    if width < cfg.min_bbox_size_m or height < cfg.min_bbox_size_m:
        logger.debug(
            "Rejected %s candidate: bounding box %.1fm x %.1fm below %.1fm",
            strategy.value,
            width,
            height,
            cfg.min_bbox_size_m,
        )
        return None

    return LoopResult(
        polygon=tuple(polygon),
        enclosed_cell_ids=cells,
        closure_point=closure_point,
        strategy=strategy,
        perimeter_m=perimeter,
    )


# ---------------------------------------------------------------------------
# Main Service: detect_closed_loop
# ---------------------------------------------------------------------------
def detect_closed_loop(
    path: Sequence[GeoFix],
    new_fix: GeoFix,
    config: TerritoryConfig | None = None,
) -> LoopOutcome:
    """Detect whether ``new_fix`` closes a loop in ``path``.

    Args:
        path: Accumulated path of the session (read-only)
        new_fix: Filtered fix about to be appended
        config: Engine settings; ``default_config()`` when omitted

    Returns:
        LoopResult for the first candidate that passes validation, else
        NoLoop with the reason.

    Example:
        >>> outcome = detect_closed_loop(path, fix)
        >>> if outcome.kind == "loop":
        ...     print(outcome.strategy, outcome.cell_count)
    """
    if len(path) < MIN_PATH_POINTS:
        return NoLoop(reason=NoLoopReason.PATH_TOO_SHORT)

    cfg = config or default_config()

    for strategy, raw_polygon, closure_point in _candidates(path, new_fix, cfg):
        result = _validate(strategy, raw_polygon, closure_point, cfg)
        if result is not None:
            logger.info(
                "Loop closed by %s: %d vertices, %d cells, perimeter %.1fm",
                strategy.value,
                len(result.polygon),
                result.cell_count,
                result.perimeter_m,
            )
            return result

    return NoLoop(reason=NoLoopReason.NO_VALID_CANDIDATE)
