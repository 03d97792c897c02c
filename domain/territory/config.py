"""Territory Bounded Context - Configuration.

Tuning constants of the geometry engine, supplied once at initialization.
Every field may be overridden through a ``TERRITORY_``-prefixed environment
variable (e.g. ``TERRITORY_GRID_SIZE_DEG=0.00005``).
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
GRID_SIZE_DEG = 0.00006  # ~6.7 m of latitude per cell
ACCURACY_THRESHOLD_M = 150.0
EMA_ALPHA = 0.25
RDP_EPSILON_DEG = 0.000015  # ~1.7 m, display-path simplification


class TerritoryConfig(BaseSettings):
    """Geometry engine settings.

    Distances suffixed ``_m`` are meters; ``_deg`` are degrees of
    latitude/longitude.
    """

    # Grid
    grid_size_deg: float = Field(default=GRID_SIZE_DEG, gt=0)

    # Fix filter
    accuracy_threshold_m: float = Field(default=ACCURACY_THRESHOLD_M, gt=0)
    ema_alpha: float = Field(default=EMA_ALPHA, gt=0, le=1)

    # Loop detection
    snap_to_start_m: float = Field(default=8.0, ge=0)
    proximity_snap_m: float = Field(default=5.0, ge=0)
    loop_safety_buffer: int = Field(default=3, ge=1)
    min_loop_perimeter_m: float = Field(default=5.0, ge=0)
    min_enclosed_cells: int = Field(default=1, ge=1)
    min_bbox_size_m: float = Field(default=5.0, ge=0)
    clean_epsilon_deg: float = Field(default=1e-10, gt=0)

    # Simplification / enclosure
    rdp_epsilon_deg: float = Field(default=RDP_EPSILON_DEG, ge=0)
    enclosure_simplify_fraction: float = Field(default=0.1, ge=0, le=1)
    max_scan_rows: int = Field(default=1000, gt=0)
    max_scan_cols: int = Field(default=1000, gt=0)

    # Capture session
    min_move_m: float = Field(default=5.0, ge=0)
    test_mode_min_move_m: float = Field(default=0.5, ge=0)

    model_config = SettingsConfigDict(env_prefix="TERRITORY_", frozen=True)

    @property
    def enclosure_epsilon_deg(self) -> float:
        """Tight RDP tolerance applied to polygons before enclosure."""
        return self.rdp_epsilon_deg * self.enclosure_simplify_fraction


@lru_cache(maxsize=1)
def default_config() -> TerritoryConfig:
    """Return the process-wide default configuration (read once)."""
    return TerritoryConfig()
