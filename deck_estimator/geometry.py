# deck_estimator/geometry.py
# Plane geometry for deck outlines:
# - signed area / area with cutouts (shoelace)
# - vertex centroid, outward edge normals, bbox
# - even-odd point-in-polygon
# - rotation about the origin (align decking direction with the x axis)
# - scanline intervals (used by row decomposition and substructure lines)
# - simple-ring check (self-intersecting outlines are flagged, not fixed)
# - repeated-vertex cleanup, convex clipping (stair footprint vs outline)
#
# Pure functions, stdlib only. Coordinates are millimeters.

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from .types import Point, Polygon, Ring

EPS = 1e-9

Interval = Tuple[float, float]


def signed_area(ring: Sequence[Point]) -> float:
    """Shoelace area in mm². Positive for counter-clockwise rings."""
    n = len(ring)
    if n < 3:
        return 0.0
    s = 0.0
    for i in range(n):
        a = ring[i]
        b = ring[(i + 1) % n]
        s += a.x_mm * b.y_mm - b.x_mm * a.y_mm
    return s / 2.0


def area_mm2(polygon: Polygon) -> float:
    if len(polygon.outer) < 3:
        return 0.0
    outer = abs(signed_area(polygon.outer))
    holes = sum(abs(signed_area(h)) for h in polygon.holes)
    return max(0.0, outer - holes)


def area_m2(polygon: Polygon) -> float:
    """Deck area (outer minus holes) in m². Fails closed to 0 for < 3 outer points."""
    return area_mm2(polygon) / 1_000_000


def centroid(ring: Sequence[Point]) -> Point:
    """Arithmetic mean of the vertices (not area weighted)."""
    if not ring:
        return Point(0.0, 0.0)
    n = len(ring)
    return Point(sum(p.x_mm for p in ring) / n, sum(p.y_mm for p in ring) / n)


def bbox(ring: Iterable[Point]) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y)"""
    pts = list(ring)
    if not pts:
        return 0.0, 0.0, 0.0, 0.0
    xs = [p.x_mm for p in pts]
    ys = [p.y_mm for p in pts]
    return min(xs), min(ys), max(xs), max(ys)


def edge_length(a: Point, b: Point) -> float:
    return math.hypot(b.x_mm - a.x_mm, b.y_mm - a.y_mm)


def perimeter(ring: Sequence[Point]) -> float:
    n = len(ring)
    if n < 2:
        return 0.0
    return sum(edge_length(ring[i], ring[(i + 1) % n]) for i in range(n))


def edge_normals(ring: Sequence[Point]) -> List[Tuple[float, float]]:
    """
    Outward unit normal for every edge i (vertex i -> i+1).
    Winding decides the side; when the ring has no usable area the normal is
    flipped to point away from the vertex centroid instead.
    """
    n = len(ring)
    if n < 2:
        return []
    area = signed_area(ring)
    c = centroid(ring)
    out: List[Tuple[float, float]] = []
    for i in range(n):
        a = ring[i]
        b = ring[(i + 1) % n]
        dx, dy = b.x_mm - a.x_mm, b.y_mm - a.y_mm
        length = math.hypot(dx, dy)
        if length < EPS:
            out.append((0.0, 0.0))
            continue
        nx, ny = dy / length, -dx / length  # right-hand side: outward for CCW
        if abs(area) > EPS:
            if area < 0:
                nx, ny = -nx, -ny
        else:
            mx, my = (a.x_mm + b.x_mm) / 2 - c.x_mm, (a.y_mm + b.y_mm) / 2 - c.y_mm
            if nx * mx + ny * my < 0:
                nx, ny = -nx, -ny
        out.append((nx, ny))
    return out


def point_in_polygon(point: Point, ring: Sequence[Point]) -> bool:
    """
    Even-odd ray casting. Points exactly on the boundary get whatever the
    half-open edge rule gives them; callers must not rely on either answer.
    """
    inside = False
    n = len(ring)
    if n < 3:
        return False
    x, y = point.x_mm, point.y_mm
    j = n - 1
    for i in range(n):
        xi, yi = ring[i].x_mm, ring[i].y_mm
        xj, yj = ring[j].x_mm, ring[j].y_mm
        if (yi > y) != (yj > y):
            x_cross = xi + (y - yi) * (xj - xi) / (yj - yi)
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def point_in_deck(point: Point, polygon: Polygon) -> bool:
    """Inside the outer ring and outside every hole."""
    if not point_in_polygon(point, polygon.outer):
        return False
    return not any(point_in_polygon(point, h) for h in polygon.holes)


# ----------------------------
# Rotation
# ----------------------------

def rotate_point(p: Point, angle_deg: float) -> Point:
    rad = math.radians(angle_deg)
    c, s = math.cos(rad), math.sin(rad)
    return Point(p.x_mm * c - p.y_mm * s, p.x_mm * s + p.y_mm * c)


def rotate_ring(ring: Sequence[Point], angle_deg: float) -> Ring:
    return tuple(rotate_point(p, angle_deg) for p in ring)


def rotate(polygon: Polygon, angle_deg: float) -> Polygon:
    """Rotate every vertex (outer and holes) about the origin."""
    return Polygon(
        outer=rotate_ring(polygon.outer, angle_deg),
        holes=tuple(rotate_ring(h, angle_deg) for h in polygon.holes),
    )


def swap_xy(polygon: Polygon) -> Polygon:
    def _swap(ring: Sequence[Point]) -> Ring:
        return tuple(Point(p.y_mm, p.x_mm) for p in ring)

    return Polygon(outer=_swap(polygon.outer), holes=tuple(_swap(h) for h in polygon.holes))


# ----------------------------
# Scanlines
# ----------------------------

def _crossings_at_y(ring: Sequence[Point], y: float) -> List[float]:
    xs: List[float] = []
    n = len(ring)
    for i in range(n):
        a = ring[i]
        b = ring[(i + 1) % n]
        if a.y_mm == b.y_mm:
            continue  # horizontal edges never cross a horizontal scanline
        y_min, y_max = min(a.y_mm, b.y_mm), max(a.y_mm, b.y_mm)
        # half-open [y_min, y_max) so a shared vertex is counted once
        if y < y_min or y >= y_max:
            continue
        t = (y - a.y_mm) / (b.y_mm - a.y_mm)
        xs.append(a.x_mm + t * (b.x_mm - a.x_mm))
    return xs


def intervals_at_y(polygon: Polygon, y: float) -> List[Interval]:
    """
    Covered x-intervals of the deck (outer minus holes) on the line y=const,
    sorted left to right. Every contiguous interval is reported on its own.
    """
    if len(polygon.outer) < 3:
        return []
    xs = _crossings_at_y(polygon.outer, y)
    for h in polygon.holes:
        if len(h) >= 3:
            xs.extend(_crossings_at_y(h, y))
    xs.sort()

    out: List[Interval] = []
    for i in range(0, len(xs) - 1, 2):
        x0, x1 = xs[i], xs[i + 1]
        if x1 - x0 > EPS:
            out.append((x0, x1))
    return out


def intervals_at_x(polygon: Polygon, x: float) -> List[Interval]:
    """Covered y-intervals on the line x=const."""
    return intervals_at_y(swap_xy(polygon), x)


def span_at_y(polygon: Polygon, y: float) -> float:
    return sum(x1 - x0 for x0, x1 in intervals_at_y(polygon, y))


def span_at_x(polygon: Polygon, x: float) -> float:
    return sum(y1 - y0 for y0, y1 in intervals_at_x(polygon, x))


def grid_positions(lo: float, hi: float, spacing: float, edge_inset: float = 0.5) -> List[float]:
    """
    Line positions across [lo, hi]: both edges (inset so the scanline stays
    inside the outline) plus every `spacing` step in between.
    """
    if hi - lo <= 2 * edge_inset or spacing <= 0:
        return []
    pos = [lo + edge_inset]
    k = 1
    while lo + k * spacing < hi - edge_inset:
        pos.append(lo + k * spacing)
        k += 1
    pos.append(hi - edge_inset)
    return pos


# ----------------------------
# Validity
# ----------------------------

def _orient(a: Point, b: Point, c: Point) -> float:
    return (b.x_mm - a.x_mm) * (c.y_mm - a.y_mm) - (b.y_mm - a.y_mm) * (c.x_mm - a.x_mm)


def _on_segment(a: Point, b: Point, p: Point) -> bool:
    return (
        min(a.x_mm, b.x_mm) - EPS <= p.x_mm <= max(a.x_mm, b.x_mm) + EPS
        and min(a.y_mm, b.y_mm) - EPS <= p.y_mm <= max(a.y_mm, b.y_mm) + EPS
    )


def segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    d1 = _orient(q1, q2, p1)
    d2 = _orient(q1, q2, p2)
    d3 = _orient(p1, p2, q1)
    d4 = _orient(p1, p2, q2)
    if ((d1 > EPS and d2 < -EPS) or (d1 < -EPS and d2 > EPS)) and (
        (d3 > EPS and d4 < -EPS) or (d3 < -EPS and d4 > EPS)
    ):
        return True
    if abs(d1) <= EPS and _on_segment(q1, q2, p1):
        return True
    if abs(d2) <= EPS and _on_segment(q1, q2, p2):
        return True
    if abs(d3) <= EPS and _on_segment(p1, p2, q1):
        return True
    if abs(d4) <= EPS and _on_segment(p1, p2, q2):
        return True
    return False


def find_self_intersection(ring: Sequence[Point]) -> Optional[Tuple[int, int]]:
    """Return the first pair of non-adjacent edge indices that touch, else None."""
    n = len(ring)
    if n < 4:
        return None
    for i in range(n):
        a1, a2 = ring[i], ring[(i + 1) % n]
        for j in range(i + 2, n):
            if i == 0 and j == n - 1:
                continue  # first and last edge share vertex 0
            b1, b2 = ring[j], ring[(j + 1) % n]
            if segments_intersect(a1, a2, b1, b2):
                return i, j
    return None


def is_simple(ring: Sequence[Point]) -> bool:
    return len(ring) >= 3 and find_self_intersection(ring) is None


def dedupe_ring(ring: Sequence[Point], tol: float = 1e-6) -> Ring:
    """
    Drop repeated consecutive vertices, including a closing vertex equal to
    the first one. Zero-length edges would otherwise read as self-touching.
    """
    out: List[Point] = []
    for p in ring:
        if out and edge_length(out[-1], p) <= tol:
            continue
        out.append(p)
    while len(out) > 1 and edge_length(out[-1], out[0]) <= tol:
        out.pop()
    return tuple(out)


def dedupe_edge_map(ring: Sequence[Point], tol: float = 1e-6) -> List[Optional[int]]:
    """
    For every edge i of `ring`, its index in dedupe_ring(ring), or None when
    the edge has zero length and disappears.
    """
    n = len(ring)
    kept = -1
    out: List[Optional[int]] = []
    for i in range(n):
        if kept < 0 or edge_length(ring[i - 1], ring[i]) > tol:
            kept += 1
        if edge_length(ring[i], ring[(i + 1) % n]) <= tol:
            out.append(None)
        else:
            out.append(kept)
    m = len(dedupe_ring(ring, tol))
    return [None if k is not None and k >= m else k for k in out]


# ----------------------------
# Clipping
# ----------------------------

def is_convex(ring: Sequence[Point]) -> bool:
    n = len(ring)
    if n < 3:
        return False
    sign = 0.0
    for i in range(n):
        o = _orient(ring[i], ring[(i + 1) % n], ring[(i + 2) % n])
        if abs(o) <= EPS:
            continue
        if sign == 0.0:
            sign = o
        elif (o > 0) != (sign > 0):
            return False
    return sign != 0.0


def clip_ring(subject: Sequence[Point], clip: Sequence[Point]) -> Ring:
    """
    Sutherland-Hodgman: the part of `subject` inside the convex ring `clip`.
    The subject may be concave; disjoint pieces come back joined by
    zero-area slivers along the clip boundary, which keeps the area exact.
    """
    if len(subject) < 3 or len(clip) < 3:
        return ()
    ccw = signed_area(clip) > 0
    out: List[Point] = list(subject)
    n = len(clip)
    for i in range(n):
        a, b = clip[i], clip[(i + 1) % n]

        def inside(p: Point) -> bool:
            o = _orient(a, b, p)
            return o >= -EPS if ccw else o <= EPS

        def cut(p: Point, q: Point) -> Point:
            d1 = _orient(a, b, p)
            d2 = _orient(a, b, q)
            t = d1 / (d1 - d2)
            return Point(p.x_mm + t * (q.x_mm - p.x_mm), p.y_mm + t * (q.y_mm - p.y_mm))

        src, out = out, []
        if not src:
            break
        prev = src[-1]
        for cur in src:
            if inside(cur):
                if not inside(prev):
                    out.append(cut(prev, cur))
                out.append(cur)
            elif inside(prev):
                out.append(cut(prev, cur))
            prev = cur
    return dedupe_ring(out)


def point_segment_distance(p: Point, a: Point, b: Point) -> float:
    dx, dy = b.x_mm - a.x_mm, b.y_mm - a.y_mm
    len2 = dx * dx + dy * dy
    if len2 <= EPS:
        return edge_length(p, a)
    t = ((p.x_mm - a.x_mm) * dx + (p.y_mm - a.y_mm) * dy) / len2
    t = max(0.0, min(1.0, t))
    return edge_length(p, Point(a.x_mm + t * dx, a.y_mm + t * dy))
