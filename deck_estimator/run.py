# deck_estimator/run.py
# High-level convenience runner that ties together:
# - quantity calculation (consumer or pro)
# - cut plan metrics + optional CP-SAT comparison
# - optional CSV / JSON export
# - matplotlib visualization (deck rows, cut plan)
#
# This is meant to be called from your own scripts or a future API layer.
# Example:
#   from deck_estimator.run import run_estimate
#   res = run_estimate(plan, product, ruleset, "clip", out_dir="out")

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .cut_plan_cp_sat import MinStockParams, MinStockResult, solve_min_stock
from .io_csv import export_all
from .metrics import CutPlanMetrics, PlanGap, compute_cut_plan_metrics, cut_plan_gap
from .plotting import PlotStyle, plot_cut_plan, plot_deck
from .quantities import calculate_quantities, joist_lines
from .rows import RowDecomposition, decompose_plan
from .types import Plan, Product, Quantities, Ruleset
from .utils import save_quantities_json, timer
from .validate import raise_on_errors, validate_cut_plan


@dataclass(frozen=True)
class RunResult:
    quantities: Quantities
    rows: RowDecomposition
    cut_metrics: Optional[CutPlanMetrics]
    min_stock: Optional[MinStockResult]
    gap: Optional[PlanGap]
    seconds: float


def run_estimate(
    plan: Plan,
    product: Product,
    ruleset: Ruleset,
    fastening_mode: str,
    *,
    compare_optimal: bool = False,
    time_limit_s: float = 10.0,
    out_dir: Optional[str | Path] = None,
    export_prefix: str = "deck",
    show_plot: bool = False,
    plot_style: Optional[PlotStyle] = None,
):
    """
    Run the estimator end-to-end.

    Returns RunResult. If show_plot=True, returns (RunResult, deck_fig, cut_fig)
    where cut_fig is None without a cut plan.
    """
    with timer("estimate") as t:
        q = calculate_quantities(plan, product, ruleset, fastening_mode)
        rows = decompose_plan(plan, ruleset.gap_mm)

        metrics = None
        best = None
        gap = None
        if q.cut_plan is not None:
            raise_on_errors(validate_cut_plan(q.cut_plan))
            metrics = compute_cut_plan_metrics(q.cut_plan)
            if compare_optimal:
                best = solve_min_stock(
                    rows.rows,
                    product.stock_length_mm,
                    MinStockParams(kerf_mm=ruleset.kerf_mm, time_limit_s=time_limit_s),
                )
                gap = cut_plan_gap(q.cut_plan, best)

    res = RunResult(
        quantities=q,
        rows=rows,
        cut_metrics=metrics,
        min_stock=best,
        gap=gap,
        seconds=t["seconds"],
    )

    if out_dir is not None:
        outp = Path(out_dir)
        export_all(q, out_dir=outp, prefix=export_prefix, rows=rows)
        save_quantities_json(q, outp / f"{export_prefix}.json")

    if show_plot:
        joists = [x for x, _ in joist_lines(rows.rotated, ruleset.secondary_spacing_mm)]
        style = plot_style or PlotStyle()
        deck_fig = plot_deck(rows, joist_xs=joists, style=style) if rows.rows else None
        cut_fig = plot_cut_plan(q.cut_plan, style=style) if q.cut_plan is not None and q.cut_plan.rows else None
        return res, deck_fig, cut_fig

    return res
