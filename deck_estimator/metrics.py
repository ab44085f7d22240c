# deck_estimator/metrics.py
# Metrics for board cut plans:
# - material balance (required / waste / leftover vs dispensed stock)
# - utilization and offcut reuse
# - gap between the greedy plan and the CP-SAT minimum
#
# These metrics are planner-agnostic: they work for any CutPlan.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .cut_plan_cp_sat import MinStockResult
from .types import CutPlan


@dataclass(frozen=True)
class CutPlanMetrics:
    required_mm: int
    dispensed_mm: int
    waste_mm: int
    leftover_mm: int
    stock_pieces: int
    offcut_rows: int

    @property
    def utilization(self) -> float:
        """Share of dispensed stock that ends up in the deck (0..1)."""
        if self.dispensed_mm == 0:
            return 0.0
        return self.required_mm / self.dispensed_mm

    @property
    def balanced(self) -> bool:
        return self.required_mm + self.waste_mm + self.leftover_mm == self.dispensed_mm


def compute_cut_plan_metrics(plan: CutPlan) -> CutPlanMetrics:
    return CutPlanMetrics(
        required_mm=plan.required_total_mm,
        dispensed_mm=plan.dispensed_mm,
        waste_mm=plan.waste_mm,
        leftover_mm=plan.leftover_mm,
        stock_pieces=plan.stock_pieces,
        offcut_rows=sum(1 for r in plan.rows if r.source_kind == "offcut"),
    )


@dataclass(frozen=True)
class PlanGap:
    greedy_pieces: int
    min_pieces: int
    proven_optimal: bool

    @property
    def extra_pieces(self) -> int:
        return self.greedy_pieces - self.min_pieces


def cut_plan_gap(plan: CutPlan, best: MinStockResult) -> PlanGap:
    """How many more stock pieces the greedy plan uses than the exact solve."""
    return PlanGap(
        greedy_pieces=plan.stock_pieces,
        min_pieces=min(best.stock_pieces, plan.stock_pieces),
        proven_optimal=best.optimal,
    )


def stock_area_m2(plan: CutPlan, board_width_mm: float) -> float:
    return plan.stock_pieces * plan.stock_length_mm * board_width_mm / 1_000_000


def effective_loss_rate(plan: CutPlan, board_width_mm: float, deck_m2: float) -> Optional[float]:
    """(stock area consumed - deck area) / deck area; None for an empty deck."""
    if deck_m2 <= 0:
        return None
    return (stock_area_m2(plan, board_width_mm) - deck_m2) / deck_m2
