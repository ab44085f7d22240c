# deck_estimator/test_stairs.py

from __future__ import annotations

from deck_estimator.config import make_default_product, make_default_ruleset
from deck_estimator.quantities import calculate_quantities
from deck_estimator.sample_data import rectangle
from deck_estimator.stairs import calculate_stairs
from deck_estimator.types import Plan, StairConfig, StairsSpec


def _plan(stairs) -> Plan:
    return Plan(polygon=rectangle(2000, 1000), board_width_mm=140, stairs=stairs)


def test_single_flight_areas() -> None:
    st = StairsSpec(enabled=True, items=(StairConfig("s1", 1000, 3, 280, 180),))
    res = calculate_stairs(_plan(st))
    assert res is not None
    assert res.tread_area_m2 == 0.84
    assert res.riser_area_m2 == 0.54
    assert res.total_area_m2 == 1.38
    assert res.items[0].unit_rise_mm == 180
    assert res.items[0].unit_run_mm == 280


def test_disabled_or_missing_stairs_give_none() -> None:
    assert calculate_stairs(_plan(None)) is None
    st = StairsSpec(enabled=False, items=(StairConfig("s1", 1000, 3, 280, 180),))
    assert calculate_stairs(_plan(st)) is None


def test_degenerate_flights_are_skipped() -> None:
    st = StairsSpec(
        enabled=True,
        items=(
            StairConfig("half-drawn", 1000, 0, 280, 180),
            StairConfig("no-width", 0, 4, 280, 180),
            StairConfig("s1", 1000, 3, 280, 180),
        ),
    )
    res = calculate_stairs(_plan(st))
    assert [i.id for i in res.items] == ["s1"]
    assert res.total_area_m2 == 1.38


def test_flights_are_summed() -> None:
    st = StairsSpec(
        enabled=True,
        items=(
            StairConfig("a", 1000, 3, 280, 180),
            StairConfig("b", 1200, 2, 300, 170),
        ),
    )
    res = calculate_stairs(_plan(st))
    # 0.84 + 0.72 tread, 0.54 + 0.408 riser
    assert res.tread_area_m2 == 1.56
    assert res.riser_area_m2 == 0.95
    assert res.total_area_m2 == 2.51


def test_stairs_in_quantities() -> None:
    product = make_default_product()
    rules = make_default_ruleset()
    st = StairsSpec(enabled=True, items=(StairConfig("s1", 1000, 3, 280, 180),))

    q = calculate_quantities(_plan(st), product, rules, "clip")
    assert q.stairs is not None
    assert q.area.stairs_m2 == 0.84
    assert q.area.total_m2 == 2.84

    q = calculate_quantities(_plan(None), product, rules, "clip")
    assert q.stairs is None
    assert q.area.stairs_m2 == 0


def test_total_rounds_the_unrounded_sum() -> None:
    # 0.844 tread + 0.544 riser: rounding each first would give 0.84 + 0.54 = 1.38
    st = StairsSpec(enabled=True, items=(StairConfig("s1", 1000, 2, 422, 272),))
    res = calculate_stairs(_plan(st))
    assert res.tread_area_m2 == 0.84
    assert res.riser_area_m2 == 0.54
    assert res.total_area_m2 == 1.39
