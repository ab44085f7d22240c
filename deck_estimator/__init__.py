# deck_estimator/__init__.py
"""
Deck Estimator package (composite decking take-off).

Current state:
- Polygon deck outlines with cutouts, in millimetres
- Board rows from a scanline sweep at any decking direction
- Consumer estimate (area x formula loss) and pro estimate (exact rows)
- Greedy best-fit cut plan with offcut reuse and kerf
- Substructure (bearers / joists), anchors, footings, clips or screws
- Stairs, ledger on attached edges and posts from deck height
- CP-SAT minimum stock count to compare against the greedy plan
- matplotlib plots of rows and cut plans, CSV / JSON exports
"""

from .types import (
    Point,
    Polygon,
    StairConfig,
    StairsSpec,
    Plan,
    Product,
    ConsumerLossRule,
    Ruleset,
    Quantities,
    CutPlan,
    CutRow,
    Offcut,
    ValidationIssue,
    DeckInputError,
    InvalidFasteningModeError,
    RowExceedsStockError,
)

from .quantities import calculate_quantities, consumer_loss_rate
from .stairs import calculate_stairs
from .cut_plan import plan_cuts
from .rows import BoardRow, RowDecomposition, decompose_rows, decompose_plan

from .config import DEFAULTS, make_default_product, make_default_ruleset

from .metrics import CutPlanMetrics, compute_cut_plan_metrics

from .plotting import (
    PlotStyle,
    plot_deck,
    plot_cut_plan,
    save_deck_png,
    save_cut_plan_png,
)

from .cut_plan_cp_sat import MinStockParams, MinStockResult, solve_min_stock

__all__ = [
    # types
    "Point",
    "Polygon",
    "StairConfig",
    "StairsSpec",
    "Plan",
    "Product",
    "ConsumerLossRule",
    "Ruleset",
    "Quantities",
    "CutPlan",
    "CutRow",
    "Offcut",
    "ValidationIssue",
    "DeckInputError",
    "InvalidFasteningModeError",
    "RowExceedsStockError",
    # estimation
    "calculate_quantities",
    "consumer_loss_rate",
    "calculate_stairs",
    "plan_cuts",
    "BoardRow",
    "RowDecomposition",
    "decompose_rows",
    "decompose_plan",
    # config
    "DEFAULTS",
    "make_default_product",
    "make_default_ruleset",
    # metrics
    "CutPlanMetrics",
    "compute_cut_plan_metrics",
    # plotting
    "PlotStyle",
    "plot_deck",
    "plot_cut_plan",
    "save_deck_png",
    "save_cut_plan_png",
    # solver
    "MinStockParams",
    "MinStockResult",
    "solve_min_stock",
]
