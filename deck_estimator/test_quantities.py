# deck_estimator/test_quantities.py
# End-to-end take-off on small plans (numbers checked by hand).

from __future__ import annotations

import math
from dataclasses import replace

import pytest

from deck_estimator.config import make_default_product, make_default_ruleset
from deck_estimator.logger import muted
from deck_estimator.quantities import calculate_quantities, consumer_loss_rate
from deck_estimator.sample_data import SHAPE_PRESETS, circle, rectangle, rectangle_with_cutout
from deck_estimator.types import (
    ConsumerLossRule,
    InvalidFasteningModeError,
    Plan,
    Polygon,
    RowExceedsStockError,
    Hardware,
    LengthGroup,
    StairConfig,
    StairsSpec,
    SubstructureOverrides,
    ring_from_xy,
)
from deck_estimator.utils import quantities_to_dict


def _rect_plan(**kw) -> Plan:
    return Plan(polygon=rectangle(2000, 1000), board_width_mm=140, **kw)


def test_consumer_rectangle() -> None:
    q = calculate_quantities(_rect_plan(), make_default_product(), make_default_ruleset(), "clip")

    assert q.area.deck_m2 == 2.0
    assert q.area.total_m2 == 2.0
    assert q.boards.loss_rate == pytest.approx(0.042)
    assert q.boards.qty == 5
    assert q.boards.row_count == 7
    assert q.boards.used_length_mm == 14000
    assert q.substructure.secondary_len_m == 6.0
    assert q.substructure.primary_len_m == 6.0
    assert q.substructure.primary_stock_pieces == 2
    assert q.anchors.qty == 6
    assert q.footings.qty == 1
    assert q.fasteners.intersections == 42
    assert q.fasteners.clips == 42
    assert q.fasteners.screws is None
    assert q.cut_plan is None
    assert q.ledger is None and q.posts is None
    assert q.warnings == ()


def test_screws_follow_intersections() -> None:
    rules = make_default_ruleset()
    for poly in [rectangle(2000, 1000), rectangle_with_cutout(), *SHAPE_PRESETS.values()]:
        plan = Plan(polygon=poly, board_width_mm=140)
        q = calculate_quantities(plan, make_default_product(), rules, "screw")
        assert q.fasteners.clips is None
        assert q.fasteners.screws == q.fasteners.intersections * rules.screw_per_intersection
    assert calculate_quantities(_rect_plan(), make_default_product(), rules, "screw").fasteners.screws == 84


def test_unsupported_fastening_mode_rejected_first() -> None:
    product = make_default_product(fastening_modes=("clip",))
    with pytest.raises(InvalidFasteningModeError):
        calculate_quantities(_rect_plan(), product, make_default_ruleset(), "screw")
    # rejected even when the geometry would only degrade
    broken = Plan(polygon=Polygon.from_xy([(0, 0), (1, 0)]), board_width_mm=140)
    with pytest.raises(InvalidFasteningModeError):
        calculate_quantities(broken, product, make_default_ruleset(), "nail")


@pytest.mark.parametrize("vertices", [3, 4, 8, 16, 64])
@pytest.mark.parametrize("holes", [0, 1, 5])
def test_loss_rate_within_bounds(vertices: int, holes: int) -> None:
    rule = make_default_ruleset().consumer_loss
    hole = ring_from_xy([(0, 0), (1, 0), (1, 1)])
    poly = circle(500, vertices).with_holes([hole] * holes)
    rate = consumer_loss_rate(poly, rule)
    assert rule.base <= rate <= rule.cap


def test_loss_rate_clamped_to_zero() -> None:
    rule = ConsumerLossRule(base=-0.5, vertex_factor=0.0, cutout_factor=0.0, cap=0.06)
    assert consumer_loss_rate(rectangle(), rule) == 0.0


def test_loss_rate_counts_cutouts() -> None:
    rule = make_default_ruleset().consumer_loss
    assert consumer_loss_rate(rectangle_with_cutout(), rule) == pytest.approx(0.047)


def test_disabled_stairs_absent_from_result() -> None:
    st = StairsSpec(enabled=False, items=(StairConfig("s1", 1000, 3, 280, 180),))
    q = calculate_quantities(_rect_plan(stairs=st), make_default_product(), make_default_ruleset(), "clip")
    assert q.stairs is None
    assert "stairs" not in quantities_to_dict(q)


def test_self_intersecting_outline_degrades() -> None:
    bowtie = Polygon.from_xy([(0, 0), (1000, 1000), (1000, 0), (0, 1000)])
    q = calculate_quantities(Plan(polygon=bowtie, board_width_mm=140), make_default_product(), make_default_ruleset(), "clip")
    assert q.is_degraded
    assert [w.code for w in q.warnings] == ["self_intersecting_outline"]
    assert q.boards.qty == 0
    assert q.area.deck_m2 == 0
    assert q.fasteners.clips == 0


def test_degenerate_outline_degrades_but_keeps_stairs() -> None:
    st = StairsSpec(enabled=True, items=(StairConfig("s1", 1000, 3, 280, 180),))
    plan = Plan(polygon=Polygon.from_xy([(0, 0), (1000, 0)]), board_width_mm=140, stairs=st)
    q = calculate_quantities(plan, make_default_product(), make_default_ruleset(), "clip")
    assert [w.code for w in q.warnings] == ["degenerate_outline"]
    assert q.substructure.primary_len_m == 0
    assert q.stairs is not None
    assert q.area.total_m2 == 0.84


def test_unlisted_board_width_is_a_warning_only() -> None:
    plan = Plan(polygon=rectangle(2000, 1000), board_width_mm=130)
    q = calculate_quantities(plan, make_default_product(), make_default_ruleset(), "clip")
    assert not q.is_degraded
    assert [w.code for w in q.warnings] == ["board_width_not_offered"]
    assert q.boards.qty > 0


def test_pro_mode_cut_plan() -> None:
    q = calculate_quantities(_rect_plan(), make_default_product(), make_default_ruleset("pro"), "clip")
    cp = q.cut_plan
    assert cp is not None
    assert q.boards.qty == cp.stock_pieces == 7
    assert cp.waste_mm == 0
    assert cp.leftover_mm == 7000
    assert q.boards.loss_rate == 0
    # 7 x 3.0 m x 0.14 m = 2.94 m² of stock for a 2.0 m² deck
    assert q.boards.effective_loss_rate == pytest.approx(0.47)


def test_pro_mode_without_cut_plan_output() -> None:
    rules = make_default_ruleset("pro", enable_cut_plan=False)
    q = calculate_quantities(_rect_plan(), make_default_product(), rules, "clip")
    assert q.cut_plan is None
    assert q.boards.qty == 7


def test_pro_mode_row_longer_than_stock() -> None:
    plan = Plan(polygon=rectangle(4000, 1000), board_width_mm=140)
    with pytest.raises(RowExceedsStockError) as ei:
        calculate_quantities(plan, make_default_product(), make_default_ruleset("pro"), "clip")
    assert ei.value.row_id == "R0"


def test_ledger_and_posts() -> None:
    plan = _rect_plan(attached_edge_indices=(0,), deck_height_mm=600)
    q = calculate_quantities(plan, make_default_product(), make_default_ruleset(), "clip")
    assert q.ledger is not None
    assert q.ledger.length_m == 2.0
    assert q.ledger.anchor_bolts_qty == 3
    assert q.posts is not None
    assert q.posts.qty == q.footings.qty == 1
    assert q.posts.each_length_mm == 600
    assert q.posts.total_length_m == 0.6
    assert q.posts.stock_pieces == 1


def test_direction_changes_rows_not_area() -> None:
    product, rules = make_default_product(), make_default_ruleset()
    q0 = calculate_quantities(_rect_plan(), product, rules, "clip")
    q90 = calculate_quantities(_rect_plan(decking_direction_deg=90), product, rules, "clip")
    assert q0.area == q90.area
    assert q90.boards.row_count == 14
    assert q90.boards.used_length_mm == 14000


def test_calculation_is_pure() -> None:
    product = make_default_product()
    rules = replace(make_default_ruleset("pro"), kerf_mm=3)
    plan = Plan(polygon=rectangle_with_cutout(3000, 2000, (1000, 500, 2000, 1500)), board_width_mm=140)
    a = calculate_quantities(plan, product, rules, "clip")
    b = calculate_quantities(plan, product, rules, "clip")
    assert a == b
    assert math.isclose(a.area.deck_m2, 5.0)


def test_degraded_geometry_is_logged(capsys) -> None:
    bowtie = Plan(polygon=Polygon.from_xy([(0, 0), (1000, 1000), (1000, 0), (0, 1000)]), board_width_mm=140)
    calculate_quantities(bowtie, make_default_product(), make_default_ruleset(), "clip")
    assert "self_intersecting_outline" in capsys.readouterr().err

    with muted():
        calculate_quantities(bowtie, make_default_product(), make_default_ruleset(), "clip")
    assert capsys.readouterr().err == ""


def test_explicitly_closed_outline_is_not_degraded() -> None:
    closed = Polygon.from_xy([(0, 0), (2000, 0), (2000, 1000), (0, 1000), (0, 0)])
    q = calculate_quantities(Plan(polygon=closed, board_width_mm=140), make_default_product(), make_default_ruleset(), "clip")
    assert not q.is_degraded
    assert q.warnings == ()
    assert q.area.deck_m2 == 2.0
    assert q.boards.qty == 5
    # the closing vertex is not counted as a corner
    assert q.boards.loss_rate == pytest.approx(0.042)


def _footprint(*xy) -> StairsSpec:
    return StairsSpec(
        enabled=True,
        footprint_polygon=Polygon.from_xy(xy),
        items=(StairConfig("s1", 1000, 3, 280, 180),),
    )


def test_stair_footprint_off_the_deck() -> None:
    st = _footprint((500, -1000), (1500, -1000), (1500, 0), (500, 0))
    q = calculate_quantities(_rect_plan(stairs=st), make_default_product(), make_default_ruleset(), "clip")
    assert q.area.deck_m2 == 2.0
    assert q.boards.used_length_mm == 14000
    assert [w.code for w in q.warnings] == ["stair_footprint_outside"]


def test_stair_footprint_across_the_edge_pro() -> None:
    st = _footprint((500, -500), (1500, -500), (1500, 500), (500, 500))
    q = calculate_quantities(_rect_plan(stairs=st), make_default_product(), make_default_ruleset("pro"), "clip")
    assert q.area.deck_m2 == 1.5
    assert [w.code for w in q.warnings] == ["stair_footprint_clipped"]
    # 4 split scanlines of 2 x 500 mm, 3 full ones
    assert q.boards.used_length_mm == 4 * 1000 + 3 * 2000


def test_stair_footprint_is_not_a_cutout_for_loss_rate() -> None:
    st = _footprint((500, 200), (1500, 200), (1500, 600), (500, 600))
    q = calculate_quantities(_rect_plan(stairs=st), make_default_product(), make_default_ruleset(), "clip")
    assert q.area.deck_m2 == 1.6
    assert q.boards.loss_rate == pytest.approx(0.042)
    assert q.warnings == ()


def test_substructure_detail_rectangle() -> None:
    q = calculate_quantities(_rect_plan(), make_default_product(), make_default_ruleset(), "clip")
    d = q.substructure.detail
    assert d is not None

    # 3 inner bearers of 2000 plus the 4 outline edges
    assert d.bearer.inner_pieces == 3
    assert d.bearer.rim_pieces == 4
    assert d.bearer.pieces == 7
    assert d.bearer.total_length_m == 12.0
    assert d.bearer.breakdown == (LengthGroup(2000, 5), LengthGroup(1000, 2))
    assert d.bearer.stock_pieces == 3

    assert d.joist.pieces == d.joist.inner_pieces == 6
    assert d.joist.rim_pieces == 0
    assert d.joist.breakdown == (LengthGroup(1000, 6),)
    assert d.joist.stock_pieces == 2

    assert d.hardware == Hardware(
        anchor_bolts=4,
        angle_brackets=26,
        joist_hangers=6,
        self_drilling_screws=104,
    )


def test_ledger_edge_replaces_bearers() -> None:
    plan = _rect_plan(attached_edge_indices=(0,), deck_height_mm=600)
    q = calculate_quantities(plan, make_default_product(), make_default_ruleset(), "clip")
    d = q.substructure.detail

    # the y=0.5 bearer sits on the wall edge and the rim bearer there is dropped
    assert q.substructure.primary_len_m == 4.0
    assert q.anchors.qty == 4
    assert d.bearer.inner_pieces == 2
    assert d.bearer.rim_pieces == 3
    assert d.bearer.breakdown == (LengthGroup(2000, 3), LengthGroup(1000, 2))
    assert d.bearer.total_length_m == 8.0

    hw = d.hardware
    assert hw.anchor_bolts == 4 * q.footings.qty
    assert hw.angle_brackets == (5 + 6) * 2
    assert hw.self_drilling_screws == hw.angle_brackets * 4
    assert hw.base_plates == hw.post_caps == q.posts.qty == 1


def test_degraded_result_has_no_detail() -> None:
    bowtie = Plan(polygon=Polygon.from_xy([(0, 0), (1000, 1000), (1000, 0), (0, 1000)]), board_width_mm=140)
    q = calculate_quantities(bowtie, make_default_product(), make_default_ruleset(), "clip")
    assert q.substructure.detail is None
    assert "detail" not in quantities_to_dict(q)["substructure"]


def test_substructure_overrides_need_advanced_flag() -> None:
    plan = _rect_plan(substructure_overrides=SubstructureOverrides(primary_len_mm=7500))
    product = make_default_product()

    q = calculate_quantities(plan, product, replace(make_default_ruleset(), show_advanced_overrides=False), "clip")
    assert q.substructure.primary_len_m == 6.0
    assert [w.code for w in q.warnings] == ["substructure_overrides_ignored"]

    q = calculate_quantities(plan, product, replace(make_default_ruleset(), show_advanced_overrides=True), "clip")
    assert q.substructure.primary_len_m == 7.5
    assert q.substructure.primary_stock_pieces == 2
    assert q.substructure.secondary_len_m == 6.0
    assert q.anchors.qty == 6
    assert q.warnings == ()
