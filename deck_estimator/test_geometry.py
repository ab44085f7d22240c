# deck_estimator/test_geometry.py
# Geometry kernel checks: area, containment, rotation, scanline intervals.

from __future__ import annotations

import math

from deck_estimator.geometry import (
    area_m2,
    clip_ring,
    dedupe_edge_map,
    dedupe_ring,
    edge_normals,
    grid_positions,
    intervals_at_x,
    intervals_at_y,
    is_convex,
    is_simple,
    perimeter,
    point_in_deck,
    point_segment_distance,
    rotate_point,
    signed_area,
)
from deck_estimator.sample_data import rectangle, rectangle_with_cutout
from deck_estimator.types import Point, Polygon


def test_rectangle_area_is_exact() -> None:
    poly = Polygon.from_xy([(0, 0), (2000, 0), (2000, 1000), (0, 1000)])
    assert area_m2(poly) == 2.00


def test_area_ignores_winding_and_subtracts_holes() -> None:
    cw = Polygon.from_xy([(0, 0), (0, 1000), (2000, 1000), (2000, 0)])
    assert area_m2(cw) == 2.00
    assert area_m2(rectangle_with_cutout()) == 7.0


def test_degenerate_outline_has_zero_area() -> None:
    assert area_m2(Polygon.from_xy([(0, 0), (1000, 0)])) == 0
    assert area_m2(Polygon.from_xy([])) == 0


def test_point_in_deck_respects_cutouts() -> None:
    poly = rectangle_with_cutout()
    assert point_in_deck(Point(500, 500), poly)
    assert not point_in_deck(Point(2000, 1000), poly)
    assert not point_in_deck(Point(5000, 1000), poly)


def test_rotate_point_quarter_turn() -> None:
    p = rotate_point(Point(1000, 0), 90)
    assert math.isclose(p.x_mm, 0, abs_tol=1e-9)
    assert math.isclose(p.y_mm, 1000)


def test_intervals_split_around_cutout() -> None:
    poly = rectangle_with_cutout()
    assert intervals_at_y(poly, 1000) == [(0, 1500), (2500, 4000)]
    assert intervals_at_y(poly, 250) == [(0, 4000)]


def test_intervals_half_open_at_vertices() -> None:
    poly = rectangle(2000, 1000)
    assert intervals_at_y(poly, 0) == [(0, 2000)]
    assert intervals_at_y(poly, 1000) == []
    assert intervals_at_x(poly, 400) == [(0, 1000)]


def test_grid_positions_include_inset_edges() -> None:
    assert grid_positions(0, 2000, 400) == [0.5, 400, 800, 1200, 1600, 1999.5]
    assert grid_positions(0, 1000, 600) == [0.5, 600, 999.5]
    assert grid_positions(0, 1, 400) == []


def test_self_intersection_detected() -> None:
    bowtie = Polygon.from_xy([(0, 0), (1000, 1000), (1000, 0), (0, 1000)])
    assert not is_simple(bowtie.outer)
    assert is_simple(rectangle().outer)


def test_edge_normals_point_outward_for_both_windings() -> None:
    ccw = rectangle(2000, 1000).outer
    cw = tuple(reversed(ccw))
    assert edge_normals(ccw)[0] == (0.0, -1.0)
    # reversed ring: edge 0 runs (0,1000) -> (2000,1000), the top edge
    assert edge_normals(cw)[0] == (0.0, 1.0)


def test_perimeter() -> None:
    assert perimeter(rectangle(2000, 1000).outer) == 6000


def test_explicitly_closed_ring_is_simple_after_dedupe() -> None:
    closed = Polygon.from_xy([(0, 0), (2000, 0), (2000, 1000), (0, 1000), (0, 0)]).outer
    assert not is_simple(closed)  # zero-length closing edge touches its neighbours
    ring = dedupe_ring(closed)
    assert ring == rectangle(2000, 1000).outer
    assert is_simple(ring)


def test_dedupe_keeps_edge_indices_in_step() -> None:
    ring = Polygon.from_xy([(0, 0), (2000, 0), (2000, 0), (2000, 1000), (0, 1000), (0, 0)]).outer
    assert len(dedupe_ring(ring)) == 4
    assert dedupe_edge_map(ring) == [0, None, 1, 2, 3, None]


def test_clip_ring_keeps_overlap_with_convex_window() -> None:
    window = Polygon.from_xy([(500, -500), (1500, -500), (1500, 500), (500, 500)]).outer
    part = clip_ring(rectangle(2000, 1000).outer, window)
    assert abs(signed_area(part)) == 500_000

    below = Polygon.from_xy([(500, -1000), (1500, -1000), (1500, 0), (500, 0)]).outer
    assert abs(signed_area(clip_ring(rectangle(2000, 1000).outer, below))) == 0


def test_clip_ring_concave_subject() -> None:
    # L-shape clipped by a window over both arms: 1000x500 + 500x500
    l_shape = Polygon.from_xy([(0, 0), (2000, 0), (2000, 1000), (1000, 1000), (1000, 2000), (0, 2000)]).outer
    window = Polygon.from_xy([(500, 500), (1500, 500), (1500, 1500), (500, 1500)]).outer
    assert abs(signed_area(clip_ring(l_shape, window))) == 750_000


def test_is_convex() -> None:
    assert is_convex(rectangle().outer)
    assert is_convex(tuple(reversed(rectangle().outer)))
    notch = Polygon.from_xy([(0, 0), (1000, 0), (500, 200), (1000, 1000), (0, 1000)]).outer
    assert not is_convex(notch)


def test_point_segment_distance() -> None:
    a, b = Point(0, 0), Point(2000, 0)
    assert point_segment_distance(Point(1000, 0.5), a, b) == 0.5
    assert point_segment_distance(Point(2003, 4), a, b) == 5.0
