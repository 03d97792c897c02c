"""Territory Bounded Context - Path Simplifier.

Ramer-Douglas-Peucker simplification in planar degree space.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from domain.territory.value_objects import GeoFix


def _segment_distances(
    pts: NDArray[np.float64], start: NDArray[np.float64], end: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Distance from each row of ``pts`` to segment ``start -> end``.

    A zero-length segment degrades to plain point distance.
    """
    chord = end - start
    length_sq = float(chord @ chord)
    if length_sq == 0.0:
        return np.hypot(*(pts - start).T)
    t = np.clip(((pts - start) @ chord) / length_sq, 0.0, 1.0)
    foot = start + t[:, None] * chord
    return np.hypot(*(pts - foot).T)


def simplify(points: Sequence[GeoFix], epsilon: float) -> list[GeoFix]:
    """Simplify a path with the Ramer-Douglas-Peucker algorithm.

    Points farther than ``epsilon`` (degrees) from the chord of their span
    are kept and split the span in two; spans with no such point collapse
    to their endpoints. The first and last points always survive, and the
    result never has more points than the input.

    Args:
        points: Path to simplify (a closed polygon is fine: its degenerate
            first/last chord falls back to point distance)
        epsilon: Tolerance in degrees; 0 keeps every off-line point,
            ``math.inf`` keeps only the endpoints

    Returns:
        New list of the retained fixes, in input order.
    """
    if len(points) <= 2:
        return list(points)

    # x = lng, y = lat
    coords = np.array([(p.lng, p.lat) for p in points], dtype=np.float64)
    keep = np.zeros(len(points), dtype=bool)
    keep[0] = keep[-1] = True

    # Explicit stack of (first, last) index spans instead of recursion
    stack = [(0, len(points) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        dists = _segment_distances(coords[first + 1 : last], coords[first], coords[last])
        offset = int(np.argmax(dists))
        if dists[offset] > epsilon:
            split = first + 1 + offset
            keep[split] = True
            stack.append((first, split))
            stack.append((split, last))

    return [p for p, kept in zip(points, keep) if kept]
