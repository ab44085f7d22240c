# deck_estimator/rows.py
# Board row decomposition:
# - rotate the deck so boards run along the x axis
# - sweep scanlines every (board width + gap) across the y extent
# - every covered x-interval on a scanline is one required board length
# - stair footprint: cut out only where it lies on the deck
#
# Output order is sweep order (bottom to top, left to right inside a row), which
# is what makes cut planning reproducible.

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .geometry import (
    bbox,
    clip_ring,
    dedupe_edge_map,
    dedupe_ring,
    intervals_at_y,
    is_convex,
    point_in_polygon,
    rotate,
    segments_intersect,
    signed_area,
)
from .types import Plan, Polygon, Ring
from .utils import round_half_up

# Scanlines start this far inside the extent so they never run along an edge.
EDGE_INSET_MM = 0.5


@dataclass(frozen=True)
class BoardRow:
    """One contiguous board run, in the rotated (boards along x) frame."""
    row_id: str
    row_index: int     # scanline index, empty scanlines included
    y_mm: float
    x0_mm: float
    x1_mm: float
    length_mm: int     # rounded to the nearest mm


@dataclass(frozen=True)
class RowDecomposition:
    rows: Tuple[BoardRow, ...]
    row_count: int       # scanlines with covered length
    pitch_mm: float
    rotated: Polygon     # the polygon the scan ran on

    @property
    def used_length_mm(self) -> int:
        return sum(r.length_mm for r in self.rows)

    def required_lengths(self) -> List[int]:
        return [r.length_mm for r in self.rows]


# Footprint overlap below this (mm²) counts as touching only.
FOOTPRINT_AREA_TOL_MM2 = 1.0


@dataclass(frozen=True)
class StairFootprint:
    """
    How the stair footprint sits against the deck outline:
      inside   - whole footprint is cut out
      clipped  - footprint crosses the outline, the overlap is cut out
      outside  - no overlap, nothing is cut out
      ignored  - crosses the outline but is not convex, nothing is cut out
    """
    status: str
    cutout: Optional[Ring] = None


def normalize_plan(plan: Plan) -> Plan:
    """
    Drop repeated vertices (explicitly closed rings, double clicks) and
    re-index attached edges to match.
    """
    poly = plan.polygon
    outer = dedupe_ring(poly.outer)
    holes = tuple(dedupe_ring(h) for h in poly.holes)
    if outer == poly.outer and holes == poly.holes:
        return plan
    edge_map = dedupe_edge_map(poly.outer)
    attached: List[int] = []
    for i in plan.attached_edge_indices:
        if not 0 <= i < len(edge_map):
            attached.append(i)  # left for validation to report
        elif edge_map[i] is not None:
            attached.append(edge_map[i])
    return replace(
        plan,
        polygon=Polygon(outer=outer, holes=holes),
        attached_edge_indices=tuple(attached),
    )


def _rings_cross(a: Ring, b: Ring) -> bool:
    for i in range(len(a)):
        for j in range(len(b)):
            if segments_intersect(a[i], a[(i + 1) % len(a)], b[j], b[(j + 1) % len(b)]):
                return True
    return False


def stair_footprint(plan: Plan) -> Optional[StairFootprint]:
    """None unless stairs are enabled and carry a footprint."""
    st = plan.stairs
    if st is None or not st.enabled or st.footprint_polygon is None:
        return None
    fp = dedupe_ring(st.footprint_polygon.outer)
    outer = plan.polygon.outer
    fp_mm2 = abs(signed_area(fp))
    if len(fp) < 3 or len(outer) < 3 or fp_mm2 <= FOOTPRINT_AREA_TOL_MM2:
        return StairFootprint("outside")

    if is_convex(fp):
        part = clip_ring(outer, fp)
        part_mm2 = abs(signed_area(part))
        if part_mm2 <= FOOTPRINT_AREA_TOL_MM2:
            return StairFootprint("outside")
        if part_mm2 >= fp_mm2 - FOOTPRINT_AREA_TOL_MM2:
            return StairFootprint("inside", fp)
        return StairFootprint("clipped", part)

    if all(point_in_polygon(p, outer) for p in fp) and not _rings_cross(fp, outer):
        return StairFootprint("inside", fp)
    return StairFootprint("ignored")


def deck_polygon(plan: Plan) -> Polygon:
    """
    The walkable surface: plan polygon minus whatever part of the stair
    footprint lies on the deck.
    """
    fp = stair_footprint(plan)
    if fp is None or fp.cutout is None:
        return plan.polygon
    return plan.polygon.with_holes([fp.cutout])


def _row_id(row_index: int, part: int, parts: int) -> str:
    if parts == 1:
        return f"R{row_index}"
    return f"R{row_index}.{part + 1}"


def decompose_rows(
    polygon: Polygon,
    board_width_mm: float,
    gap_mm: float,
    decking_direction_deg: float,
    *,
    edge_inset_mm: Optional[float] = None,
) -> RowDecomposition:
    """
    Split the deck into board rows parallel to the decking direction.
    Degenerate input (< 3 outer points) yields an empty decomposition.
    """
    pitch = float(board_width_mm) + float(gap_mm)
    if pitch <= 0:
        raise ValueError(f"board width + gap must be > 0, got {pitch}")

    rot = rotate(polygon, -decking_direction_deg)
    if len(rot.outer) < 3:
        return RowDecomposition(rows=(), row_count=0, pitch_mm=pitch, rotated=rot)

    inset = EDGE_INSET_MM if edge_inset_mm is None else float(edge_inset_mm)
    _, min_y, _, max_y = bbox(rot.outer)

    rows: List[BoardRow] = []
    row_count = 0
    row_index = 0
    y = min_y + inset
    while y <= max_y - inset:
        spans = [(x0, x1) for x0, x1 in intervals_at_y(rot, y) if round_half_up(x1 - x0) > 0]
        if spans:
            row_count += 1
            for k, (x0, x1) in enumerate(spans):
                rows.append(
                    BoardRow(
                        row_id=_row_id(row_index, k, len(spans)),
                        row_index=row_index,
                        y_mm=y,
                        x0_mm=x0,
                        x1_mm=x1,
                        length_mm=int(round_half_up(x1 - x0)),
                    )
                )
        row_index += 1
        y = min_y + inset + row_index * pitch

    return RowDecomposition(rows=tuple(rows), row_count=row_count, pitch_mm=pitch, rotated=rot)


def decompose_plan(plan: Plan, gap_mm: float) -> RowDecomposition:
    plan = normalize_plan(plan)
    return decompose_rows(
        deck_polygon(plan),
        plan.board_width_mm,
        gap_mm,
        plan.decking_direction_deg,
    )
