"""Territory Bounded Context.

Responsible for turning walked paths into owned grid cells:
- Value Objects: GeoFix, BoundingBox, LoopResult, NoLoop
- Services: cell_id (grid), filter_fix, simplify, enclosed_cells,
  detect_closed_loop
- Entities: CaptureSession
"""
