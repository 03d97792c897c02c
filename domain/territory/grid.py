"""Territory Bounded Context - Grid Quantizer.

Maps continuous coordinates onto the fixed square grid that territory is
owned in. A cell is identified by its quantized center, rendered as
``"<lat>_<lng>"`` with 7 fractional digits.
"""

from __future__ import annotations

import math

from domain.territory.errors import InvalidCellIdError
from domain.territory.value_objects import BoundingBox, GeoFix

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
CELL_ID_SEPARATOR = "_"
CELL_ID_DECIMALS = 7  # 1e-7 deg (~1 cm) resolution, far below any grid step


# ---------------------------------------------------------------------------
# Index math
# ---------------------------------------------------------------------------
def cell_index(lat: float, lng: float, grid_size: float) -> tuple[int, int]:
    """Return the ``(row, col)`` grid index nearest to a coordinate."""
    return round(lat / grid_size), round(lng / grid_size)


def format_cell_id(i_lat: int, i_lng: int, grid_size: float) -> str:
    """Render an exact grid index as a cell identifier.

    Used directly by the enclosure engine, whose row/column indices are
    already exact and must not be rounded again.
    """
    return (
        f"{i_lat * grid_size:.{CELL_ID_DECIMALS}f}"
        f"{CELL_ID_SEPARATOR}"
        f"{i_lng * grid_size:.{CELL_ID_DECIMALS}f}"
    )


def cell_id(lat: float, lng: float, grid_size: float) -> str:
    """Return the identifier of the cell containing ``(lat, lng)``.

    Pure and deterministic: two coordinates rounding to the same grid index
    always produce byte-identical identifiers.

    Example:
        >>> cell_id(-23.5505, -46.6333, 0.00006)
        '-23.5504800_-46.6333200'
    """
    i_lat, i_lng = cell_index(lat, lng, grid_size)
    return format_cell_id(i_lat, i_lng, grid_size)


def quantize(fix: GeoFix, grid_size: float) -> GeoFix:
    """Snap a fix to the center of its grid cell."""
    i_lat, i_lng = cell_index(fix.lat, fix.lng, grid_size)
    return fix.model_copy(update={"lat": i_lat * grid_size, "lng": i_lng * grid_size})


# ---------------------------------------------------------------------------
# Cell identifier parsing
# ---------------------------------------------------------------------------
def parse_cell_id(value: str, grid_size: float) -> tuple[int, int]:
    """Recover the grid index encoded in a cell identifier.

    Raises:
        InvalidCellIdError: If the identifier is not two numbers joined by
            the separator, or does not sit on the grid.
    """
    parts = value.split(CELL_ID_SEPARATOR)
    if len(parts) != 2:
        raise InvalidCellIdError(value, "expected '<lat>_<lng>'")
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise InvalidCellIdError(value, "components must be numeric") from e
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidCellIdError(value, "components must be finite")

    index = cell_index(lat, lng, grid_size)
    # Round-trip check: an off-grid value would format differently
    if format_cell_id(*index, grid_size) != value:
        raise InvalidCellIdError(value, "not aligned to the grid")
    return index


def cell_bounds(value: str, grid_size: float) -> BoundingBox:
    """Return the extent of a cell: its center +/- half a grid step."""
    i_lat, i_lng = parse_cell_id(value, grid_size)
    lat, lng = i_lat * grid_size, i_lng * grid_size
    half = grid_size / 2
    return BoundingBox(
        min_lat=max(-90.0, lat - half),
        min_lng=max(-180.0, lng - half),
        max_lat=min(90.0, lat + half),
        max_lng=min(180.0, lng + half),
    )
