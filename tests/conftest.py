"""Root pytest configuration for all tests.

Provides configuration fixtures shared by the territory and infrastructure
suites. Builders for fixes and paths live in tests/conftest_utils.py.
"""

from __future__ import annotations

import logging
import os

import pytest

from domain.territory.config import TerritoryConfig


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch) -> TerritoryConfig:
    """Default engine configuration, isolated from TERRITORY_* env vars."""
    for key in list(os.environ):
        if key.upper().startswith("TERRITORY_"):
            monkeypatch.delenv(key)
    return TerritoryConfig()


@pytest.fixture
def grid_size(config: TerritoryConfig) -> float:
    return config.grid_size_deg


@pytest.fixture(autouse=True)
def _territory_debug_logs(caplog: pytest.LogCaptureFixture) -> None:
    """Capture territory debug logs so assertions can inspect them."""
    caplog.set_level(logging.DEBUG, logger="domain.territory")
