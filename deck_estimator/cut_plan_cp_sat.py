# deck_estimator/cut_plan_cp_sat.py
# Exact 1D cutting-stock check with CP-SAT (OR-Tools).
#
# The greedy planner in cut_plan.py is what the estimator reports (it is fast and
# keeps rows in laying order). This module answers "how many stock pieces would an
# optimal assignment need?" so the greedy result can be judged:
# - bin-packing model: every row goes to exactly one stock piece
# - a row consumes its length + kerf, capped at the stock length
# - used pieces are packed at low indices (symmetry break)
# - single worker + fixed seed so repeated runs agree

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ortools.sat.python import cp_model

from .cut_plan import RequiredItem, normalize_required, plan_cuts
from .types import CutRow, RowExceedsStockError


@dataclass(frozen=True)
class MinStockParams:
    kerf_mm: int = 0
    time_limit_s: float = 10.0


@dataclass(frozen=True)
class MinStockResult:
    stock_pieces: int
    lower_bound: int                    # ceil(total / stock)
    optimal: bool                       # proven by the solver
    pieces: Tuple[Tuple[str, ...], ...] # row ids cut from each stock piece


def solve_min_stock(
    required: Iterable[RequiredItem],
    stock_length_mm: int,
    params: Optional[MinStockParams] = None,
) -> MinStockResult:
    """
    Minimum number of stock pieces that can cover all rows.
    Raises RowExceedsStockError like the greedy planner does.
    """
    params = params or MinStockParams()
    items = normalize_required(required)
    C = int(stock_length_mm)
    kerf = max(0, int(params.kerf_mm))

    for rid, length in items:
        if length > C:
            raise RowExceedsStockError(rid, length, C)

    n = len(items)
    if n == 0:
        return MinStockResult(stock_pieces=0, lower_bound=0, optimal=True, pieces=())

    weights = [min(C, length + kerf) for _, length in items]
    lower = math.ceil(sum(weights) / C)

    # Without kerf the greedy plan is a feasible packing, so it bounds the model.
    # With kerf its last cut per piece may overrun by < kerf; fall back to one piece per row.
    greedy = plan_cuts(items, C, kerf_mm=kerf)
    max_bins = max(1, greedy.stock_pieces) if kerf == 0 else n

    m = cp_model.CpModel()

    x = [[m.NewBoolVar(f"x[{i},{b}]") for b in range(max_bins)] for i in range(n)]
    used = [m.NewBoolVar(f"used[{b}]") for b in range(max_bins)]

    for i in range(n):
        m.AddExactlyOne(x[i])

    for b in range(max_bins):
        m.Add(sum(weights[i] * x[i][b] for i in range(n)) <= C * used[b])

    for b in range(max_bins - 1):
        m.Add(used[b] >= used[b + 1])

    # Row i can only go to pieces 0..i (another symmetry break)
    for i in range(n):
        for b in range(i + 1, max_bins):
            m.Add(x[i][b] == 0)

    m.Add(sum(used) >= lower)
    m.Minimize(sum(used))

    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = float(params.time_limit_s)
    solver.parameters.num_workers = 1
    solver.parameters.random_seed = 0

    status = solver.Solve(m)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        # No model answer within the time limit: the greedy plan stands.
        pieces = _pieces_from_greedy(greedy.rows)
        return MinStockResult(stock_pieces=greedy.stock_pieces, lower_bound=lower, optimal=False, pieces=pieces)

    buckets: List[List[str]] = [[] for _ in range(max_bins)]
    for i, (rid, _) in enumerate(items):
        for b in range(max_bins):
            if solver.Value(x[i][b]) == 1:
                buckets[b].append(rid)
                break

    pieces = tuple(tuple(bk) for bk in buckets if bk)
    return MinStockResult(
        stock_pieces=len(pieces),
        lower_bound=lower,
        optimal=status == cp_model.OPTIMAL,
        pieces=pieces,
    )


def _pieces_from_greedy(rows: Iterable[CutRow]) -> Tuple[Tuple[str, ...], ...]:
    by_source: Dict[str, List[str]] = {}
    for r in rows:
        by_source.setdefault(r.source_id, []).append(r.row_id)
    return tuple(tuple(v) for v in by_source.values())
