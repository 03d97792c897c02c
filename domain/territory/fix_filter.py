"""Territory Bounded Context - Fix Filter.

Smooths or rejects raw location samples before they enter a path.
"""

from __future__ import annotations

import logging

from domain.territory.config import TerritoryConfig, default_config
from domain.territory.value_objects import GeoFix

logger = logging.getLogger(__name__)


def filter_fix(
    raw: GeoFix,
    previous: GeoFix | None,
    test_mode: bool = False,
    config: TerritoryConfig | None = None,
) -> GeoFix | None:
    """Filter one raw fix against the last accepted one.

    Rules, in order:
        1. Test mode passes ``raw`` through untouched (scripted playback).
        2. A fix less accurate than the threshold is dropped, unless there is
           no previous fix to fall back on.
        3. The first fix of a path is accepted as-is.
        4. Otherwise latitude and longitude are smoothed with an exponential
           moving average; accuracy and timestamp come from ``raw``.

    Returns:
        The fix to append, or None if the sample was rejected.
    """
    if test_mode:
        return raw

    cfg = config or default_config()

    if (
        previous is not None
        and raw.accuracy is not None
        and raw.accuracy > cfg.accuracy_threshold_m
    ):
        logger.debug(
            "Dropped fix: accuracy=%.0fm > threshold=%.0fm",
            raw.accuracy,
            cfg.accuracy_threshold_m,
        )
        return None

    if previous is None:
        return raw

    alpha = cfg.ema_alpha
    return GeoFix(
        lat=alpha * raw.lat + (1 - alpha) * previous.lat,
        lng=alpha * raw.lng + (1 - alpha) * previous.lng,
        accuracy=raw.accuracy,
        timestamp=raw.timestamp,
    )
