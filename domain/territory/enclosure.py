"""Territory Bounded Context - Enclosure Engine.

Computes the grid cells whose center lies inside a closed polygon.

Definition: a cell is enclosed when ``contains(polygon, r*g, c*g)`` holds
for its center (ray casting, even-odd rule). ``enclosed_cells`` produces the
same set with a scanline sweep: one pass per grid row instead of one
point-in-polygon test per cell of the bounding box.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np

from domain.territory.config import TerritoryConfig, default_config
from domain.territory.geometry import crosses_latitude, crossing_lng
from domain.territory.grid import format_cell_id
from domain.territory.simplification import simplify
from domain.territory.value_objects import GeoFix

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Point-in-polygon
# ---------------------------------------------------------------------------
def contains(polygon: Sequence[GeoFix], lat: float, lng: float) -> bool:
    """Ray-casting point-in-polygon test (even-odd rule).

    The polygon is implicitly closed. A point is inside when an odd number
    of edges cross its latitude strictly east of it, so points on a
    southern or western boundary count as inside and points on a northern
    or eastern boundary do not.
    """
    inside = False
    for i in range(len(polygon)):
        a, b = polygon[i - 1], polygon[i]
        if crosses_latitude(a, b, lat) and lng < crossing_lng(a, b, lat):
            inside = not inside
    return inside


# ---------------------------------------------------------------------------
# Exact grid index helpers
# ---------------------------------------------------------------------------
def _first_index_at_or_above(value: float, grid_size: float) -> int:
    """Smallest integer ``k`` with ``k * grid_size >= value``.

    Checked against the floating product itself so that the sweep agrees
    with ``contains`` evaluated at ``k * grid_size``.
    """
    k = math.ceil(value / grid_size)
    while k * grid_size < value:
        k += 1
    while (k - 1) * grid_size >= value:
        k -= 1
    return k


# ---------------------------------------------------------------------------
# Scanline enclosure
# ---------------------------------------------------------------------------
def enclosed_cells(
    polygon: Sequence[GeoFix], config: TerritoryConfig | None = None
) -> frozenset[str]:
    """Return the identifiers of all cells whose center lies inside ``polygon``.

    The polygon is first re-simplified at a tight tolerance (a small fraction
    of the display RDP tolerance) to shed self-intersecting jitter.

    Guards:
        - fewer than 3 points: empty result
        - more grid rows than ``config.max_scan_rows`` or more grid columns
          than ``config.max_scan_cols`` (e.g. a GPS jump across a
          continent): empty result, logged as a warning

    Args:
        polygon: Closed (or implicitly closed) ring of fixes
        config: Engine settings; ``default_config()`` when omitted

    Returns:
        Frozen set of cell identifiers (unordered).
    """
    if len(polygon) < 3:
        return frozenset()

    cfg = config or default_config()
    g = cfg.grid_size_deg

    ring = simplify(polygon, cfg.enclosure_epsilon_deg)
    if len(ring) < 3:
        return frozenset()

    lat = np.array([p.lat for p in ring], dtype=np.float64)
    lng = np.array([p.lng for p in ring], dtype=np.float64)

    # Edge i runs from vertex i-1 to vertex i (implicit closing edge included)
    a_lat, a_lng = np.roll(lat, 1), np.roll(lng, 1)
    b_lat, b_lng = lat, lng

    # Orient every edge south -> north so the interpolated longitude does not
    # depend on winding direction
    swap = b_lat < a_lat
    lo_lat = np.where(swap, b_lat, a_lat)
    lo_lng = np.where(swap, b_lng, a_lng)
    hi_lat = np.where(swap, a_lat, b_lat)
    hi_lng = np.where(swap, a_lng, b_lng)

    row_start = _first_index_at_or_above(float(lat.min()), g)
    row_stop = _first_index_at_or_above(float(lat.max()), g)
    n_rows = row_stop - row_start
    if n_rows > cfg.max_scan_rows:
        logger.warning(
            "Enclosure aborted: polygon spans %d grid rows (limit %d)",
            n_rows,
            cfg.max_scan_rows,
        )
        return frozenset()

    n_cols = _first_index_at_or_above(float(lng.max()), g) - _first_index_at_or_above(
        float(lng.min()), g
    )
    if n_cols > cfg.max_scan_cols:
        logger.warning(
            "Enclosure aborted: polygon spans %d grid columns (limit %d)",
            n_cols,
            cfg.max_scan_cols,
        )
        return frozenset()

    cells: set[str] = set()
    for row in range(row_start, row_stop):
        y = row * g
        straddle = (a_lat > y) != (b_lat > y)
        if not straddle.any():
            continue

        xs = np.sort(
            (hi_lng[straddle] - lo_lng[straddle])
            * (y - lo_lat[straddle])
            / (hi_lat[straddle] - lo_lat[straddle])
            + lo_lng[straddle]
        )

        # Even-odd: centers in [xs[2k], xs[2k+1]) are inside
        for x_in, x_out in zip(xs[0::2], xs[1::2]):
            col_start = _first_index_at_or_above(float(x_in), g)
            col_stop = _first_index_at_or_above(float(x_out), g)
            for col in range(col_start, col_stop):
                cells.add(format_cell_id(row, col, g))

    return frozenset(cells)
