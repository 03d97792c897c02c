"""Territory Capture Domain Layer.

This package contains the core business logic organized by bounded contexts:
- territory: GPS fix filtering, path simplification, loop detection and
  polygon-to-grid enclosure
"""

from domain import territory

__all__ = ["territory"]
