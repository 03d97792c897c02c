"""Territory Bounded Context - Geometry primitives.

Distances are great-circle meters on a spherical Earth; everything else
(intersections, point-in-polygon) works in planar degree space with
longitude as x and latitude as y. At walking scale the planar
approximation is far below GPS noise.
"""

from __future__ import annotations

from collections.abc import Sequence

from pyproj import Geod

from domain.territory.value_objects import BoundingBox, GeoFix

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
EARTH_RADIUS_M = 6_371_000.0
INTERSECTION_DENOM_EPS = 1e-14  # Below this, segments are treated as parallel

# Sphere (flattening 0): inverse geodesic reduces to the great-circle distance
_geod = Geod(a=EARTH_RADIUS_M, f=0.0)


# ---------------------------------------------------------------------------
# Distances
# ---------------------------------------------------------------------------
def distance_m(start: GeoFix, end: GeoFix) -> float:
    """Great-circle distance between two fixes in meters."""
    return _distance_m(start.lat, start.lng, end.lat, end.lng)


def _distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    _, _, distance = _geod.inv(lng1, lat1, lng2, lat2)
    return float(abs(distance))


def path_length_m(points: Sequence[GeoFix]) -> float:
    """Sum of consecutive great-circle distances along a path."""
    if len(points) < 2:
        return 0.0
    lats = [p.lat for p in points]
    lngs = [p.lng for p in points]
    return float(_geod.line_length(lngs, lats))


# ---------------------------------------------------------------------------
# Extents
# ---------------------------------------------------------------------------
def bounding_box(points: Sequence[GeoFix]) -> BoundingBox:
    """Smallest box containing every point. ``points`` must be non-empty."""
    lats = [p.lat for p in points]
    lngs = [p.lng for p in points]
    return BoundingBox(
        min_lat=min(lats), min_lng=min(lngs), max_lat=max(lats), max_lng=max(lngs)
    )


def bbox_size_m(bbox: BoundingBox) -> tuple[float, float]:
    """Physical ``(width_m, height_m)`` of a box.

    Width is measured along the southern edge, height along the western
    meridian.
    """
    width = _distance_m(bbox.min_lat, bbox.min_lng, bbox.min_lat, bbox.max_lng)
    height = _distance_m(bbox.min_lat, bbox.min_lng, bbox.max_lat, bbox.min_lng)
    return width, height


# ---------------------------------------------------------------------------
# Segment intersection
# ---------------------------------------------------------------------------
def segment_intersection(
    p1: GeoFix, p2: GeoFix, p3: GeoFix, p4: GeoFix, closed_end: bool = False
) -> tuple[float, float] | None:
    """Intersect segment ``p1 -> p2`` with segment ``p3 -> p4``.

    The first segment is closed at both ends (``0 <= t <= 1``). The second is
    half-open (``0 <= u < 1``) so that a crossing exactly through a vertex
    shared by two consecutive path edges is reported once, on the later edge.
    ``closed_end=True`` accepts ``u == 1`` for an edge whose successor is
    not searched.

    Returns:
        ``(lat, lng)`` of the crossing, or None if the segments do not cross
        or are parallel/collinear.
    """
    x1, y1 = p1.lng, p1.lat
    x2, y2 = p2.lng, p2.lat
    x3, y3 = p3.lng, p3.lat
    x4, y4 = p4.lng, p4.lat

    denom = (y4 - y3) * (x2 - x1) - (x4 - x3) * (y2 - y1)
    if abs(denom) < INTERSECTION_DENOM_EPS:
        return None

    t = ((x4 - x3) * (y1 - y3) - (y4 - y3) * (x1 - x3)) / denom
    u = ((x2 - x1) * (y1 - y3) - (y2 - y1) * (x1 - x3)) / denom

    u_ok = 0.0 <= u <= 1.0 if closed_end else 0.0 <= u < 1.0
    if 0.0 <= t <= 1.0 and u_ok:
        return y1 + t * (y2 - y1), x1 + t * (x2 - x1)
    return None


# ---------------------------------------------------------------------------
# Scanline crossings
# ---------------------------------------------------------------------------
def crosses_latitude(a: GeoFix, b: GeoFix, lat: float) -> bool:
    """True if edge ``a -> b`` straddles ``lat`` (half-open, ray-casting rule)."""
    return (a.lat > lat) != (b.lat > lat)


def crossing_lng(a: GeoFix, b: GeoFix, lat: float) -> float:
    """Longitude where edge ``a -> b`` meets ``lat``.

    Interpolated from the southern endpoint so the result is bit-identical
    whichever direction the edge is walked. Only valid when
    ``crosses_latitude(a, b, lat)``.
    """
    if (b.lat, b.lng) < (a.lat, a.lng):
        a, b = b, a
    return (b.lng - a.lng) * (lat - a.lat) / (b.lat - a.lat) + a.lng
