# deck_estimator/cut_plan.py
# Greedy cut planner for fixed-length decking stock (pro mode):
# - rows are handled strictly in the given order (sweep order from rows.py)
# - each row takes the smallest pooled offcut that is long enough,
#   otherwise a fresh stock piece is opened
# - the remainder goes back to the pool if it reaches the reuse threshold,
#   otherwise it is waste
#
# The pool is threaded through an explicit fold (_assign_row returns a new state),
# so identical input always gives the identical plan.
#
# Mass balance (exact, integer mm):
#   stock_pieces * stock_length == sum(required) + waste + leftover

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .logger import get_logger
from .rows import BoardRow
from .types import CutPlan, CutRow, Offcut, RowExceedsStockError

RequiredItem = Union[BoardRow, Tuple[str, int], int]


@dataclass(frozen=True)
class PlannerParams:
    stock_length_mm: int
    min_offcut_mm: int = 0   # remainders shorter than this are discarded
    kerf_mm: int = 0         # saw blade loss per cut


@dataclass(frozen=True)
class _PlannerState:
    rows: Tuple[CutRow, ...] = ()
    pool: Tuple[Offcut, ...] = ()
    stock_opened: int = 0


def normalize_required(required: Iterable[RequiredItem]) -> List[Tuple[str, int]]:
    """
    Accept BoardRow objects, (row_id, length) pairs or bare lengths.
    Bare lengths get ids R0, R1, ... in input order.
    """
    out: List[Tuple[str, int]] = []
    for i, item in enumerate(required):
        if isinstance(item, BoardRow):
            out.append((item.row_id, int(item.length_mm)))
        elif isinstance(item, tuple):
            rid, length = item
            out.append((str(rid), int(length)))
        else:
            out.append((f"R{i}", int(item)))
    return out


def _best_fit(pool: Sequence[Offcut], length_mm: int) -> Optional[int]:
    """Index of the shortest offcut >= length_mm (earliest wins ties)."""
    best: Optional[int] = None
    for i, off in enumerate(pool):
        if off.length_mm < length_mm:
            continue
        if best is None or off.length_mm < pool[best].length_mm:
            best = i
    return best


def _assign_row(state: _PlannerState, item: Tuple[str, int], params: PlannerParams) -> _PlannerState:
    row_id, length = item
    if length > params.stock_length_mm:
        raise RowExceedsStockError(row_id, length, params.stock_length_mm)
    if length <= 0:
        raise ValueError(f"Row {row_id} has non-positive length {length}")

    pool = list(state.pool)
    stock_opened = state.stock_opened

    idx = _best_fit(pool, length)
    if idx is not None:
        src = pool.pop(idx)
        kind, source_id, source_len = "offcut", src.source_id, src.length_mm
    else:
        stock_opened += 1
        kind, source_id, source_len = "stock", f"S{stock_opened}", params.stock_length_mm

    remainder = max(0, source_len - length - params.kerf_mm)
    if remainder > 0 and remainder >= params.min_offcut_mm:
        pool.append(Offcut(length_mm=remainder, source_row_id=row_id, source_id=source_id))

    row = CutRow(
        row_id=row_id,
        required_length_mm=length,
        source_kind=kind,
        source_id=source_id,
        remainder_mm=remainder,
    )
    return _PlannerState(rows=state.rows + (row,), pool=tuple(pool), stock_opened=stock_opened)


def plan_cuts(
    required: Iterable[RequiredItem],
    stock_length_mm: int,
    *,
    min_offcut_mm: int = 0,
    kerf_mm: int = 0,
) -> CutPlan:
    """
    Assign every required length to a stock piece or a reused offcut.

    Raises RowExceedsStockError (naming the row) if a required length is longer
    than the stock; such a row cannot be laid with one board.
    Offcuts still in the pool at the end are reported as leftover, not waste.
    """
    if stock_length_mm <= 0:
        raise ValueError(f"stock_length_mm must be > 0, got {stock_length_mm}")

    params = PlannerParams(
        stock_length_mm=int(stock_length_mm),
        min_offcut_mm=max(0, int(min_offcut_mm)),
        kerf_mm=max(0, int(kerf_mm)),
    )
    items = normalize_required(required)

    final = reduce(lambda st, it: _assign_row(st, it, params), items, _PlannerState())

    dispensed = final.stock_opened * params.stock_length_mm
    used = sum(length for _, length in items)
    leftover = sum(o.length_mm for o in final.pool)
    waste = dispensed - used - leftover

    plan = CutPlan(
        stock_length_mm=params.stock_length_mm,
        rows=final.rows,
        stock_pieces=final.stock_opened,
        waste_mm=waste,
        leftover_mm=leftover,
        offcut_pool=final.pool,
    )
    if items:
        get_logger().info(
            f"cut plan: rows={len(plan.rows)} stock={plan.stock_pieces}x{plan.stock_length_mm} mm "
            f"waste={plan.waste_mm} mm leftover={plan.leftover_mm} mm"
        )
    return plan
