# deck_estimator/test_cp_sat.py
# CP-SAT minimum stock count vs the greedy planner.

from __future__ import annotations

import pytest

from deck_estimator.config import make_default_product, make_default_ruleset
from deck_estimator.cut_plan import plan_cuts
from deck_estimator.cut_plan_cp_sat import MinStockParams, solve_min_stock
from deck_estimator.metrics import cut_plan_gap
from deck_estimator.run import run_estimate
from deck_estimator.sample_data import rectangle
from deck_estimator.types import Plan, RowExceedsStockError


def test_finds_packing_greedy_misses() -> None:
    rows = [("A", 300), ("B", 300), ("C", 700), ("D", 700)]
    greedy = plan_cuts(rows, 1000)
    assert greedy.stock_pieces == 3

    best = solve_min_stock(rows, 1000, MinStockParams(time_limit_s=5))
    assert best.stock_pieces == 2
    assert best.lower_bound == 2
    assert best.optimal
    assert sorted(rid for piece in best.pieces for rid in piece) == ["A", "B", "C", "D"]

    gap = cut_plan_gap(greedy, best)
    assert gap.extra_pieces == 1


def test_matches_greedy_when_greedy_is_tight() -> None:
    rows = [1500, 1500, 1000, 1000, 1000]
    greedy = plan_cuts(rows, 3000)
    best = solve_min_stock(rows, 3000, MinStockParams(time_limit_s=5))
    assert greedy.stock_pieces == best.stock_pieces == 2


def test_kerf_can_force_an_extra_piece() -> None:
    rows = [1000, 1000, 1000]
    assert solve_min_stock(rows, 3000, MinStockParams(time_limit_s=5)).stock_pieces == 1
    assert solve_min_stock(rows, 3000, MinStockParams(kerf_mm=5, time_limit_s=5)).stock_pieces == 2


def test_row_longer_than_stock_rejected() -> None:
    with pytest.raises(RowExceedsStockError):
        solve_min_stock([("R3", 3001)], 3000)


def test_empty_input() -> None:
    res = solve_min_stock([], 3000)
    assert res.stock_pieces == 0
    assert res.optimal


def test_run_estimate_compares_with_optimum() -> None:
    plan = Plan(polygon=rectangle(2000, 1000), board_width_mm=140)
    res = run_estimate(
        plan,
        make_default_product(),
        make_default_ruleset("pro"),
        "clip",
        compare_optimal=True,
        time_limit_s=5,
    )
    assert res.gap is not None
    # seven 2000 mm rows: no two share a 3000 mm board
    assert res.gap.min_pieces == res.gap.greedy_pieces == 7
    assert res.gap.extra_pieces == 0
    assert res.cut_metrics.balanced
