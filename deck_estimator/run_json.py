# deck_estimator/run_json.py
# Runner for UI-exported job JSON (plan + product + rules) with mode switch.
#
# Usage:
#   python -m deck_estimator.run_json --job job.json
#   python -m deck_estimator.run_json --job job.json --mode pro --compare
#
# Exports:
#   python -m deck_estimator.run_json --job job.json --mode pro --out out/
#
# Overrides:
#   python -m deck_estimator.run_json --job job.json --direction 90deg --modes clip,screw --fastening screw

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .config import parse_direction_text, parse_modes_text
from .debug import print_cut_plan, print_quantities, print_rows
from .io_json import load_job_json
from .logger import get_logger, set_enabled
from .plotting import PlotStyle, save_cut_plan_png, save_deck_png
from .quantities import joist_lines
from .run import run_estimate
from .types import DeckInputError, MODES


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Estimate decking materials from a UI-exported job JSON.")
    p.add_argument("--job", type=str, required=True, help="Path to job JSON (plan/product/rules)")

    p.add_argument("--mode", type=str, default="", choices=["", *MODES], help="Override rules.mode")
    p.add_argument("--fastening", type=str, default="", help="Override fasteningMode (clip | screw)")
    p.add_argument("--modes", type=str, default="", help="Override product fastening modes, e.g. 'clip,screw'")
    p.add_argument("--direction", type=str, default="", help="Override decking direction, e.g. '90' or '45deg'")

    # Pro controls
    p.add_argument("--kerf", type=int, default=-1, help="Override kerf (mm). -1 = use JSON rules")
    p.add_argument("--min_offcut", type=int, default=-1, help="Override reusable offcut threshold (mm). -1 = use JSON rules")
    p.add_argument("--compare", action="store_true", help="Pro: compare the greedy cut plan with a CP-SAT minimum")
    p.add_argument("--time", type=float, default=10.0, help="CP-SAT time limit (seconds)")

    # Output
    p.add_argument("--out", type=str, default="", help="Output directory for CSV + JSON exports (optional)")
    p.add_argument("--prefix", type=str, default="deck", help="Export filename prefix")
    p.add_argument("--verbose", action="store_true", help="Print every board row and cut plan row")
    p.add_argument("--quiet", action="store_true", help="Silence estimator diagnostics")

    # Plot
    p.add_argument("--png", type=str, default="", help="Save deck plot as PNG (optional, e.g. deck.png)")
    p.add_argument("--cut_png", type=str, default="", help="Save cut plan plot as PNG (pro only)")
    p.add_argument("--no_labels", action="store_true", help="Hide row labels in plots")
    p.add_argument("--grid_plot", action="store_true", help="Show grid in plots")

    return p


def main(argv: Optional[list[str]] = None) -> None:
    args = build_argparser().parse_args(argv)
    if args.quiet:
        set_enabled(False)
    log = get_logger()

    job_path = Path(args.job)
    if not job_path.exists():
        raise SystemExit(f"Job JSON not found: {job_path}")

    loaded = load_job_json(job_path)
    plan, product, ruleset = loaded.plan, loaded.product, loaded.ruleset
    fastening = args.fastening.strip() or loaded.fastening_mode

    try:
        if args.direction.strip():
            plan = replace(plan, decking_direction_deg=parse_direction_text(args.direction))
        if args.modes.strip():
            product = replace(product, fastening_modes=parse_modes_text(args.modes))
    except ValueError as e:
        raise SystemExit(f"Bad override: {e}")

    if args.mode:
        ruleset = replace(ruleset, mode=args.mode, enable_cut_plan=ruleset.enable_cut_plan or args.mode == "pro")
    if args.kerf >= 0:
        ruleset = replace(ruleset, kerf_mm=int(args.kerf))
    if args.min_offcut >= 0:
        ruleset = replace(ruleset, min_offcut_mm=int(args.min_offcut))

    out_dir = args.out.strip() or None

    try:
        res = run_estimate(
            plan,
            product,
            ruleset,
            fastening,
            compare_optimal=bool(args.compare),
            time_limit_s=float(args.time),
            out_dir=out_dir,
            export_prefix=args.prefix,
        )
    except DeckInputError as e:
        log.error(str(e))
        raise SystemExit(2)

    q = res.quantities
    print(f"Mode: {ruleset.mode}")
    print(f"Product: {product.id}  stock={product.stock_length_mm} mm  width={plan.board_width_mm:g} mm")
    print(f"Direction: {plan.decking_direction_deg:g}°  Gap: {ruleset.gap_mm:g} mm")
    print_quantities(q)

    if res.cut_metrics is not None:
        m = res.cut_metrics
        print(f"Utilization: {m.utilization:.1%}  rows from offcuts: {m.offcut_rows}")
    if res.gap is not None:
        tag = "optimal" if res.gap.proven_optimal else "best found"
        print(f"CP-SAT minimum: {res.gap.min_pieces} pieces ({tag}), greedy uses {res.gap.extra_pieces} more")
    if args.verbose:
        print("-- Board rows --")
        print_rows(res.rows.rows)
        if q.cut_plan is not None:
            print_cut_plan(q.cut_plan)
    print(f"Time: {res.seconds:.3f} s")

    if out_dir is not None:
        print(f"Exported CSV + JSON to: {out_dir}")

    style = PlotStyle(show_labels=not args.no_labels, show_grid=bool(args.grid_plot))
    if args.png.strip():
        if res.rows.rows:
            joists = [x for x, _ in joist_lines(res.rows.rotated, ruleset.secondary_spacing_mm)]
            save_deck_png(res.rows, args.png.strip(), joist_xs=joists, style=style)
            print(f"Deck plot saved to: {args.png.strip()}")
        else:
            log.warn("No board rows to plot; deck PNG skipped")
    if args.cut_png.strip():
        if q.cut_plan is not None and q.cut_plan.rows:
            save_cut_plan_png(q.cut_plan, args.cut_png.strip(), style=style)
            print(f"Cut plan plot saved to: {args.cut_png.strip()}")
        else:
            log.warn("No cut plan to plot; cut PNG skipped")


if __name__ == "__main__":
    main()
